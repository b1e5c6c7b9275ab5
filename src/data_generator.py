import numpy as np
from colorama import Fore

from config import (
    HOST_COMPOSITION,
    HOST_TYPES,
    NUMBER_OF_HOSTS,
    NUMBER_OF_VMS,
    VM_TYPES,
    WORKLOAD_DOWN,
    WORKLOAD_UP,
)
from datacenter import RESOURCES, create_datacenter, create_host, create_vm, place_vm
from utils import color_text
from weights import EPSILON


def generate_hosts(num_hosts=NUMBER_OF_HOSTS, composition=HOST_COMPOSITION, host_types=HOST_TYPES):
    hosts = []
    for host_id in range(num_hosts):
        if composition == "homogeneous":
            host_type = 0
        else:
            host_type = int(np.random.randint(0, len(host_types)))
        specs = host_types[host_type]
        hosts.append(
            create_host(
                host_id, host_type, specs["mips"], specs["pes"], specs["ram"], specs["bw"]
            )
        )
    return hosts


def generate_vms(num_vms=NUMBER_OF_VMS, parameters=None, vm_types=VM_TYPES):
    """
    Draw num_vms VMs from the VM type catalog. The tuning record of every VM
    is sized from the workload range found in parameters.
    """
    tuning_parameters = {}
    if parameters is not None:
        tuning_parameters = {
            "workload_down": parameters["workload_down"],
            "workload_up": parameters["workload_up"],
            "scaling_parameter": parameters["scaling_parameter"],
        }
        scheduling_interval = parameters["scheduling_interval"]
    else:
        scheduling_interval = None

    vms = []
    for vm_id in range(num_vms):
        specs = vm_types[int(np.random.randint(0, len(vm_types)))]
        vm_kwargs = dict(tuning_parameters)
        if scheduling_interval is not None:
            vm_kwargs["scheduling_interval"] = scheduling_interval
        vms.append(
            create_vm(
                vm_id, specs["mips"], specs["pes"], specs["ram"], specs["bw"], **vm_kwargs
            )
        )
    return vms


def is_allocation_suitable(host, vm, used):
    for resource in RESOURCES:
        if used[resource] + vm["allocated"][resource] > host["capacity"][resource] + EPSILON:
            return False
    return True


def place_vms(datacenter):
    """
    First-fit placement of every unplaced VM on the allocated resources of
    the hosts. Returns the lists of placed and failed VM ids.
    """
    used = {host_id: {resource: 0.0 for resource in RESOURCES} for host_id in datacenter["hosts"]}
    for vm in datacenter["vms"].values():
        if vm["host"] is not None:
            for resource in RESOURCES:
                used[vm["host"]][resource] += vm["allocated"][resource]

    placed = []
    failed = []
    for vm in datacenter["vms"].values():
        if vm["host"] is not None:
            continue
        for host_id, host in datacenter["hosts"].items():
            if is_allocation_suitable(host, vm, used[host_id]):
                place_vm(datacenter, vm, host)
                for resource in RESOURCES:
                    used[host_id][resource] += vm["allocated"][resource]
                placed.append(vm["id"])
                break
        else:
            print(
                color_text(
                    f"VM #{vm['id']} does not fit on any host",
                    Fore.RED,
                )
            )
            failed.append(vm["id"])

    return placed, failed


def generate_datacenter(
    parameters,
    power_function_database,
    num_hosts=NUMBER_OF_HOSTS,
    num_vms=NUMBER_OF_VMS,
    composition=HOST_COMPOSITION,
    host_types=None,
    vm_types=None,
):
    hosts = generate_hosts(num_hosts, composition, host_types or HOST_TYPES)
    vms = generate_vms(num_vms, parameters, vm_types or VM_TYPES)
    datacenter = create_datacenter(hosts, vms, power_function_database, parameters)
    placed, failed = place_vms(datacenter)
    return datacenter, placed, failed


def generate_workload_sample(vm, workload_down=WORKLOAD_DOWN, workload_up=WORKLOAD_UP):
    # Each executing cloudlet uses a random 0% to 9.9% of the VM share
    cloudlets = int(np.random.randint(workload_down, workload_up + 1))
    requested = {}
    for resource in RESOURCES:
        utilization = cloudlets * np.random.randint(0, 100) / 1000
        requested[resource] = min(utilization, 1.0) * vm["allocated"][resource]
    return cloudlets, requested


def update_workload(datacenter, current_time):
    """
    Refresh the executing workload and the requested resources of every VM.
    A VM already sampled at current_time keeps its sample.
    """
    parameters = datacenter["parameters"]
    for vm in datacenter["vms"].values():
        if vm["workload_time"] == current_time:
            continue
        cloudlets, requested = generate_workload_sample(
            vm, parameters["workload_down"], parameters["workload_up"]
        )
        vm["workload"] = cloudlets
        vm["requested"] = requested
        vm["workload_time"] = current_time
