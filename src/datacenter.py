import numpy as np

from config import HISTORY_LENGTH, SCHEDULING_INTERVAL
from local_tuning import create_tuning_record
from weights import EPSILON

try:
    profile  # type: ignore
except NameError:

    def profile(func):
        return func


RESOURCES = ("mips", "ram", "bw")


def create_host(host_id, host_type, mips, pes, ram, bw):
    return {
        "id": host_id,
        "type": host_type,
        "capacity": {"mips": mips * pes, "pes": pes, "ram": ram, "bw": bw},
        "vms": [],
        "s": {
            "previous_cpu_utilization": 0.0,
            "cpu_utilization": 0.0,
            "num_samples": 0,
            "migrating_in": [],
            "energy": 0.0,
        },
    }


def create_vm(
    vm_id,
    mips,
    pes,
    ram,
    bw,
    scheduling_interval=SCHEDULING_INTERVAL,
    application_impact=1.0,
    **tuning_parameters,
):
    return {
        "id": vm_id,
        "host": None,
        "allocated": {"mips": mips * pes, "ram": ram, "bw": bw},
        "requested": {"mips": 0.0, "ram": 0.0, "bw": 0.0},
        "workload": 0,
        "workload_time": None,
        "application_impact": application_impact,
        "utilization_history": [],
        "scheduling_interval": scheduling_interval,
        "previous_time": 0.0,
        "cpu_usage_time": 0.0,
        "tuning": create_tuning_record(**tuning_parameters),
        "migration": None,
    }


def create_datacenter(hosts, vms, power_function_database, parameters):
    return {
        "hosts": {host["id"]: host for host in hosts},
        "vms": {vm["id"]: vm for vm in vms},
        "power_functions": power_function_database,
        "parameters": parameters,
        "power": 0.0,
        "migration_count": 0,
        "dropped_migrations": 0,
        "rejected_migrations": 0,
        "migrations": {},
        "s": {
            "state": "uninitialized",
            "last_process_time": 0.0,
            "local_last_process_time": 0.0,
            "global_last_process_time": 0.0,
            "time_frame_energy": 0.0,
            "host_energy": {},
        },
    }


def get_vms_on_host(datacenter, host):
    return [datacenter["vms"][vm_id] for vm_id in host["vms"]]


def place_vm(datacenter, vm, host):
    if vm["host"] is not None:
        raise ValueError(f"VM {vm['id']} is already placed on host {vm['host']}.")
    host["vms"].append(vm["id"])
    vm["host"] = host["id"]


def remove_vm(host, vm):
    if vm["id"] not in host["vms"]:
        raise ValueError(f"VM {vm['id']} is not placed on host {host['id']}.")
    host["vms"].remove(vm["id"])


def vm_fits_on_host(datacenter, vm, host):
    """
    Check that the current demand of the resident and incoming VMs plus the
    demand of vm stays within the host capacity.
    """
    committed_vm_ids = [
        vm_id for vm_id in host["vms"] + host["s"]["migrating_in"] if vm_id != vm["id"]
    ]
    for resource in RESOURCES:
        used = sum(
            datacenter["vms"][vm_id]["requested"][resource]
            for vm_id in committed_vm_ids
        )
        if used + vm["requested"][resource] > host["capacity"][resource] + EPSILON:
            return False
    return True


def add_migrating_in_vm(datacenter, host, vm):
    if vm["id"] in host["s"]["migrating_in"] or vm["id"] in host["vms"]:
        return False
    if not vm_fits_on_host(datacenter, vm, host):
        return False
    host["s"]["migrating_in"].append(vm["id"])
    return True


def remove_migrating_in_vm(host, vm):
    if vm["id"] in host["s"]["migrating_in"]:
        host["s"]["migrating_in"].remove(vm["id"])


def add_utilization_history_value(vm, utilization, history_length=HISTORY_LENGTH):
    history = vm["utilization_history"]
    history.insert(0, utilization)
    if len(history) > history_length:
        del history[history_length:]


def get_vm_cpu_utilization(vm):
    if vm["allocated"]["mips"] <= 0:
        raise ValueError(f"VM {vm['id']} has no allocated MIPS.")
    return min(vm["requested"]["mips"] / vm["allocated"]["mips"], 1.0)


def get_host_cpu_utilization(datacenter, host):
    if host["capacity"]["mips"] <= 0:
        raise ValueError(f"Host {host['id']} has zero MIPS capacity.")
    requested_mips = sum(
        vm["requested"]["mips"] for vm in get_vms_on_host(datacenter, host)
    )
    return min(requested_mips / host["capacity"]["mips"], 1.0)


def reset_cpu_usage_time(datacenter):
    for vm in datacenter["vms"].values():
        vm["cpu_usage_time"] = 0.0


def get_utilization_mean(vm):
    """Mean of the utilization history, in MIPS."""
    history = vm["utilization_history"]
    if not history:
        return 0.0
    return float(np.mean(history)) * vm["allocated"]["mips"]


def get_utilization_variance(vm):
    """Variance of the utilization history, in MIPS squared."""
    history = vm["utilization_history"]
    if not history:
        return 0.0
    return float(np.var(np.array(history) * vm["allocated"]["mips"]))


def get_utilization_mad(vm):
    """Median absolute deviation of the utilization history."""
    history = vm["utilization_history"]
    if not history:
        return 0.0
    median = np.median(history)
    return float(np.median(np.abs(median - np.array(history))))


def update_vm_processing(vm, current_time, history_length=HISTORY_LENGTH):
    elapsed = current_time - vm["previous_time"]
    if current_time > vm["previous_time"] and elapsed >= vm["scheduling_interval"] - EPSILON:
        utilization = get_vm_cpu_utilization(vm)
        # MIPS * seconds executed since the previous sample
        vm["cpu_usage_time"] += vm["requested"]["mips"] * elapsed
        if current_time != 0 or utilization != 0:
            add_utilization_history_value(vm, utilization, history_length)
        vm["previous_time"] = current_time
    return vm["previous_time"] + vm["scheduling_interval"]


@profile
def update_hosts_processing(datacenter, current_time):
    """
    Record utilization samples for every VM and roll every host's
    (previous, current) CPU utilization pair.

    Returns the earliest time a VM is due for its next sample, or inf when
    the fleet runs no VMs.
    """
    history_length = datacenter["parameters"]["history_length"]
    min_time = np.inf

    for host in datacenter["hosts"].values():
        for vm in get_vms_on_host(datacenter, host):
            next_time = update_vm_processing(vm, current_time, history_length)
            min_time = min(min_time, next_time)

        host["s"]["previous_cpu_utilization"] = host["s"]["cpu_utilization"]
        host["s"]["cpu_utilization"] = get_host_cpu_utilization(datacenter, host)
        host["s"]["num_samples"] += 1

    return float(min_time)


def validate_fleet(datacenter):
    hosts = datacenter["hosts"]
    if not hosts:
        raise ValueError("The fleet has no hosts.")

    for host in hosts.values():
        for resource in RESOURCES:
            if host["capacity"][resource] <= 0:
                raise ValueError(
                    f"Host {host['id']} has non-positive {resource} capacity: {host['capacity'][resource]}."
                )
        if host["type"] not in datacenter["power_functions"]:
            raise ValueError(
                f"Host {host['id']} has type {host['type']} with no power function."
            )

    for vm in datacenter["vms"].values():
        if vm["host"] not in hosts:
            raise ValueError(f"VM {vm['id']} is not placed on any known host.")
        if vm["id"] not in hosts[vm["host"]]["vms"]:
            raise ValueError(
                f"VM {vm['id']} refers to host {vm['host']} that does not list it."
            )
