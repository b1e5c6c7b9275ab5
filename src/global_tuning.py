"""
Global tuning: exponential imbalance cost and single-move migration search.

For a VM v on host h the cost of every resource is B^first - B^second, where
first is the usage of v and second the usage of the other VMs on h. The
search picks the (source, target, VM) triple whose move gives the largest
cost reduction and emits it only if the reduction exceeds the threshold.
"""

import time

from config import COST_BASE, GLOBAL_INTERVAL
from datacenter import get_vms_on_host
from migration import Migration

try:
    profile  # type: ignore
except NameError:

    def profile(func):
        return func


def calculate_cpu_usage(datacenter, global_interval=GLOBAL_INTERVAL):
    cpu_usage = {}
    for host_id, host in datacenter["hosts"].items():
        host_cpu = []
        for vm in get_vms_on_host(datacenter, host):
            if vm["allocated"]["mips"] <= 0:
                raise ValueError(f"VM {vm['id']} has no allocated MIPS.")
            # MIPS-seconds over the window, 1/pes for a VM busy all interval
            host_cpu.append(
                vm["cpu_usage_time"]
                / vm["allocated"]["mips"]
                / (global_interval * host["capacity"]["pes"])
            )
        cpu_usage[host_id] = host_cpu
    return cpu_usage


def calculate_memory_usage(datacenter):
    return {
        host_id: [float(vm["requested"]["ram"]) for vm in get_vms_on_host(datacenter, host)]
        for host_id, host in datacenter["hosts"].items()
    }


def calculate_network_usage(datacenter):
    return {
        host_id: [float(vm["requested"]["bw"]) for vm in get_vms_on_host(datacenter, host)]
        for host_id, host in datacenter["hosts"].items()
    }


def check_host_capacity(host):
    for resource in ("mips", "ram", "bw"):
        if host["capacity"][resource] <= 0:
            raise ValueError(
                f"Host {host['id']} has non-positive {resource} capacity, cannot compute its cost."
            )


def calculate_cost(datacenter, cpu_usage, memory_usage, network_usage, base=COST_BASE):
    total_cost = {}
    for host_id, host in datacenter["hosts"].items():
        check_host_capacity(host)
        ram = host["capacity"]["ram"]
        bw = host["capacity"]["bw"]
        host_cpu = cpu_usage[host_id]
        host_memory = memory_usage[host_id]
        host_network = network_usage[host_id]

        host_cost = []
        for index in range(len(host_cpu)):
            cpu_first = host_cpu[index]
            memory_first = host_memory[index]
            network_first = host_network[index]
            cpu_second = sum(host_cpu) - cpu_first
            memory_second = sum(host_memory) - memory_first
            network_second = sum(host_network) - network_first

            cpu_cost = base**cpu_first - base**cpu_second
            memory_cost = base ** (memory_first / ram) - base ** (memory_second / ram)
            network_cost = base ** (network_first / bw) - base ** (network_second / bw)
            host_cost.append(cpu_cost + memory_cost + network_cost)

        total_cost[host_id] = host_cost
    return total_cost


def calculate_new_cost(
    datacenter,
    cpu_usage,
    memory_usage,
    network_usage,
    from_host_id,
    to_host_id,
    vm_index,
    base=COST_BASE,
):
    """
    Cost of the VM at vm_index on from_host if it were running on to_host.
    """
    from_host = datacenter["hosts"][from_host_id]
    to_host = datacenter["hosts"][to_host_id]
    check_host_capacity(to_host)

    cpu_second = sum(cpu_usage[to_host_id])
    memory_second = sum(memory_usage[to_host_id])
    network_second = sum(network_usage[to_host_id])

    # The moving VM's CPU share is rescaled to the target's MIPS capacity
    cpu_first = (
        from_host["capacity"]["mips"] / to_host["capacity"]["mips"]
    ) * cpu_usage[from_host_id][vm_index] + cpu_second

    cpu_cost = base**cpu_first - base**cpu_second
    memory_cost = base ** (
        memory_usage[from_host_id][vm_index] / to_host["capacity"]["ram"]
    ) - base ** (memory_second / to_host["capacity"]["ram"])
    network_cost = base ** (
        network_usage[from_host_id][vm_index] / to_host["capacity"]["bw"]
    ) - base ** (network_second / to_host["capacity"]["bw"])

    return cpu_cost + memory_cost + network_cost


@profile
def find_best_migration(datacenter, cpu_usage, memory_usage, network_usage, total_cost):
    """
    Return (cost_diff, from_host_id, to_host_id, vm_index) of the move with
    the largest positive cost reduction, or None if no move reduces the cost.
    """
    base = datacenter["parameters"]["cost_base"]
    max_cost_diff = 0.0
    best = None

    for from_host_id, host in datacenter["hosts"].items():
        for vm_index in range(len(host["vms"])):
            current_cost = total_cost[from_host_id][vm_index]
            for to_host_id in datacenter["hosts"]:
                if to_host_id == from_host_id:
                    continue
                target_cost = calculate_new_cost(
                    datacenter,
                    cpu_usage,
                    memory_usage,
                    network_usage,
                    from_host_id,
                    to_host_id,
                    vm_index,
                    base,
                )
                cost_diff = current_cost - target_cost
                if cost_diff > max_cost_diff:
                    max_cost_diff = cost_diff
                    best = (cost_diff, from_host_id, to_host_id, vm_index)

    return best


def optimize_allocation(datacenter, current_time, performance=None):
    """
    Build the cost matrices from scratch and return a list holding at most
    one Migration.
    """
    parameters = datacenter["parameters"]

    start_time = time.time()
    cpu_usage = calculate_cpu_usage(datacenter, parameters["global_interval"])
    memory_usage = calculate_memory_usage(datacenter)
    network_usage = calculate_network_usage(datacenter)
    total_cost = calculate_cost(
        datacenter, cpu_usage, memory_usage, network_usage, parameters["cost_base"]
    )
    cost_time = time.time() - start_time

    start_time = time.time()
    best = find_best_migration(
        datacenter, cpu_usage, memory_usage, network_usage, total_cost
    )
    search_time = time.time() - start_time

    if performance is not None:
        performance["calculate_cost"] = cost_time
        performance["find_migration"] = search_time

    if best is None or best[0] <= parameters["migration_threshold"]:
        return []

    cost_diff, from_host_id, to_host_id, vm_index = best
    vm_id = datacenter["hosts"][from_host_id]["vms"][vm_index]
    return [
        Migration(
            vm_id=vm_id,
            source_host_id=from_host_id,
            target_host_id=to_host_id,
            start_time=current_time,
            cost_diff=cost_diff,
        )
    ]
