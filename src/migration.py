from dataclasses import dataclass
from enum import Enum
from typing import Optional

from colorama import Fore

from datacenter import add_migrating_in_vm, remove_migrating_in_vm, remove_vm
from log import log_migration
from utils import color_text
from weights import migration as migration_weights


class MigrationStatus(Enum):
    STARTED = "started"
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"


@dataclass
class Migration:
    vm_id: int
    source_host_id: Optional[int]
    target_host_id: int
    start_time: float
    completion_delay: float = 0.0
    status: MigrationStatus = MigrationStatus.STARTED
    cost_diff: float = 0.0

    @property
    def completion_time(self):
        return self.start_time + self.completion_delay


def calculate_migration_delay(vm_ram, target_bw):
    """
    VM migration delay = RAM / bandwidth, with half of the target bandwidth
    available for migration. Around 16 seconds for 1024 MB over 1 Gbit/s.
    """
    if target_bw <= 0:
        raise ValueError(f"Target bandwidth must be positive, got {target_bw}.")
    available_bw = target_bw / (
        migration_weights["bandwidth_share"] * migration_weights["bandwidth_to_ram_rate"]
    )
    return vm_ram / available_bw


def describe_migration(migration):
    if migration.source_host_id is None:
        return f"VM #{migration.vm_id} to Host #{migration.target_host_id}"
    return (
        f"VM #{migration.vm_id} from Host #{migration.source_host_id} "
        f"to Host #{migration.target_host_id}"
    )


def start_migration(datacenter, migration, current_time, migrations_log_file=None):
    """
    Reserve the target host for the incoming VM and move the migration in
    flight. Returns the migration, or None if it was rejected or dropped.
    """
    vm = datacenter["vms"][migration.vm_id]
    target_host = datacenter["hosts"][migration.target_host_id]

    if vm["migration"] is not None:
        print(
            color_text(
                f"{current_time:.2f}: Migration of {describe_migration(migration)} is rejected, "
                f"VM #{vm['id']} is already migrating to Host #{vm['migration'].target_host_id}",
                Fore.RED,
            )
        )
        datacenter["rejected_migrations"] += 1
        log_migration(current_time, migration, "rejected", migrations_log_file)
        return None

    if vm["host"] != migration.source_host_id:
        raise ValueError(
            f"Migration of VM {vm['id']} expects source host {migration.source_host_id}, "
            f"but the VM is placed on host {vm['host']}."
        )

    print(f"{current_time:.2f}: Migration of {describe_migration(migration)} is started")

    if migration.target_host_id == vm["host"] or not add_migrating_in_vm(
        datacenter, target_host, vm
    ):
        print(
            color_text(
                f"{current_time:.2f}: Host #{target_host['id']} cannot admit VM #{vm['id']}, migration dropped",
                Fore.YELLOW,
            )
        )
        datacenter["dropped_migrations"] += 1
        log_migration(current_time, migration, "dropped", migrations_log_file)
        return None

    migration.start_time = current_time
    migration.completion_delay = calculate_migration_delay(
        vm["allocated"]["ram"], target_host["capacity"]["bw"]
    )
    migration.status = MigrationStatus.IN_FLIGHT
    vm["migration"] = migration
    datacenter["migrations"][vm["id"]] = migration
    log_migration(current_time, migration, migration.status.value, migrations_log_file)

    return migration


def complete_migration(datacenter, migration, current_time, migrations_log_file=None):
    if migration.status != MigrationStatus.IN_FLIGHT:
        raise ValueError(
            f"Migration of VM {migration.vm_id} is {migration.status.value}, not in flight."
        )

    vm = datacenter["vms"][migration.vm_id]
    target_host = datacenter["hosts"][migration.target_host_id]

    if migration.source_host_id is not None:
        remove_vm(datacenter["hosts"][migration.source_host_id], vm)
    remove_migrating_in_vm(target_host, vm)
    target_host["vms"].append(vm["id"])
    vm["host"] = target_host["id"]
    vm["migration"] = None

    migration.status = MigrationStatus.COMPLETED
    del datacenter["migrations"][vm["id"]]
    datacenter["migration_count"] += 1

    print(
        color_text(
            f"{current_time:.2f}: Migration of {describe_migration(migration)} is completed",
            Fore.GREEN,
        )
    )
    log_migration(current_time, migration, migration.status.value, migrations_log_file)

    return migration
