import os

import pytest

from clock import create_clock
from datacenter import create_datacenter, create_host, create_vm, place_vm
from simulation import load_parameters

HOST_DATABASE_FILE = os.path.join(
    os.path.dirname(__file__), "..", "simulation", "simulation_input", "host_database.csv"
)


@pytest.fixture
def host_database_file():
    return HOST_DATABASE_FILE


@pytest.fixture
def parameters():
    return load_parameters()


@pytest.fixture
def power_functions():
    return {
        0: {0.0: 100.0, 0.5: 150.0, 1.0: 200.0},
        1: {0.0: 80.0, 1.0: 180.0},
    }


@pytest.fixture
def clock():
    return create_clock()


@pytest.fixture
def build_datacenter(parameters, power_functions):
    """
    Factory building a fleet from {host_id: [vm_id, ...]}. Every host has
    2 x 1000 MIPS, 4096 RAM and 1,000,000 BW; every VM 500 MIPS, 1024 RAM and
    100,000 BW.
    """

    def build(placement, unplaced_vms=()):
        hosts = [
            create_host(host_id, host_id % 2, 1000, 2, 4096, 1000000)
            for host_id in placement
        ]
        vm_ids = [vm_id for vm_ids in placement.values() for vm_id in vm_ids]
        vms = [create_vm(vm_id, 500, 1, 1024, 100000) for vm_id in vm_ids]
        vms += [create_vm(vm_id, 500, 1, 1024, 100000) for vm_id in unplaced_vms]
        datacenter = create_datacenter(hosts, vms, power_functions, parameters)
        for host_id, vm_ids in placement.items():
            for vm_id in vm_ids:
                place_vm(datacenter, datacenter["vms"][vm_id], datacenter["hosts"][host_id])
        return datacenter

    return build
