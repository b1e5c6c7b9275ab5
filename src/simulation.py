import math
import time

from colorama import Fore

import config
from check import run_checks, validate_parameters
from clock import (
    GLOBAL_TUNING,
    LOCAL_TUNING,
    MIGRATION_COMPLETION,
    RESOURCE_PROCESSING,
    advance,
    migration_tag,
    next_due_time,
    now,
    pop_due,
    schedule_at,
    tag_kind,
)
from config import PRINT_TO_CONSOLE, SAVE_LOGS, SIMULATION_LIMIT
from datacenter import reset_cpu_usage_time, update_hosts_processing, validate_fleet
from global_tuning import optimize_allocation
from local_tuning import run_local_tuning
from log import log_performance, log_step
from migration import complete_migration, start_migration
from power import update_power_accounting
from utils import color_text

try:
    profile  # type: ignore
except NameError:

    def profile(func):
        return func


def load_parameters(config_module=config):
    """
    Read the engine parameters from a config module. Missing constants fall
    back to the values of the bundled config.py.
    """

    def get(name):
        return getattr(config_module, name, getattr(config, name))

    return {
        "scheduling_interval": get("SCHEDULING_INTERVAL"),
        "local_interval": get("LOCAL_INTERVAL"),
        "global_interval": get("GLOBAL_INTERVAL"),
        "migration_threshold": get("MIGRATION_THRESHOLD"),
        "cost_base": getattr(
            config_module,
            "COST_BASE",
            getattr(config_module, "NUMBER_OF_HOSTS", config.COST_BASE),
        ),
        "exploration_rate": get("EXPLORATION_RATE"),
        "accuracy_out_of_range_reward": get("ACCURACY_OUT_OF_RANGE_REWARD"),
        "resource_share_factor": get("RESOURCE_SHARE_FACTOR"),
        "sole_vm_share": get("SOLE_VM_SHARE"),
        "min_vm_share": get("MIN_VM_SHARE"),
        "history_length": get("HISTORY_LENGTH"),
        "disable_migrations": get("DISABLE_MIGRATIONS"),
        "workload_down": get("WORKLOAD_DOWN"),
        "workload_up": get("WORKLOAD_UP"),
        "scaling_parameter": get("SCALING_PARAMETER"),
    }


def require_running(datacenter):
    if datacenter["s"]["state"] != "running":
        raise RuntimeError(
            f"The engine is {datacenter['s']['state']}, call initialize_engine first."
        )


def initialize_engine(datacenter, clock):
    """
    Validate the fleet and the parameters, then arm the resource processing,
    local tuning and global tuning timers.
    """
    if datacenter["s"]["state"] != "uninitialized":
        raise RuntimeError("The engine is already initialized.")

    parameters = datacenter["parameters"]
    validate_parameters(parameters)
    validate_fleet(datacenter)

    current_time = now(clock)
    schedule_at(clock, current_time, RESOURCE_PROCESSING)
    schedule_at(clock, current_time + parameters["local_interval"], LOCAL_TUNING)
    schedule_at(clock, current_time + parameters["global_interval"], GLOBAL_TUNING)

    datacenter["s"]["last_process_time"] = current_time
    datacenter["s"]["local_last_process_time"] = current_time
    datacenter["s"]["global_last_process_time"] = current_time
    datacenter["s"]["state"] = "running"


@profile
def on_resource_tick(datacenter, current_time):
    """
    Sample utilization, account the energy since the previous tick and return
    the earliest time a VM is due for its next sample (inf without VMs).
    """
    require_running(datacenter)
    next_time = update_hosts_processing(datacenter, current_time)
    update_power_accounting(datacenter, current_time)
    datacenter["s"]["last_process_time"] = current_time
    return next_time


@profile
def on_local_tuning_tick(datacenter, current_time):
    require_running(datacenter)
    weights = run_local_tuning(datacenter, current_time)
    datacenter["s"]["local_last_process_time"] = current_time
    return weights


@profile
def on_global_tuning_tick(
    datacenter, current_time, migrations_log_file=None, performance=None
):
    """
    Run the cost optimizer and start the migration it decides on, if any.
    Returns the in-flight migration or None.
    """
    require_running(datacenter)
    datacenter["s"]["global_last_process_time"] = current_time

    started = None
    if not datacenter["parameters"]["disable_migrations"]:
        for migration in optimize_allocation(datacenter, current_time, performance):
            started = start_migration(
                datacenter, migration, current_time, migrations_log_file
            )

    # every global tick opens a new CPU usage window
    reset_cpu_usage_time(datacenter)
    return started


def on_migration_complete(datacenter, migration, current_time, migrations_log_file=None):
    require_running(datacenter)
    return complete_migration(datacenter, migration, current_time, migrations_log_file)


@profile
def run_step(
    datacenter,
    clock,
    update_workload=None,
    print_to_console=PRINT_TO_CONSOLE,
    log_folder_path=None,
    save_logs=SAVE_LOGS,
    performance_log_file=None,
    migrations_log_file=None,
):
    """
    Fire every timer due at the current clock time, in the order resource
    processing, migration completions, local tuning, global tuning, and re-arm
    the periodic ones. Returns the kinds of the fired timers.
    """
    require_running(datacenter)
    parameters = datacenter["parameters"]
    current_time = now(clock)
    num_vms = len(datacenter["vms"])
    num_hosts = len(datacenter["hosts"])
    fired = []

    for tag, data in pop_due(clock):
        kind = tag_kind(tag)
        status = "done"
        start_time = time.time()

        if kind == RESOURCE_PROCESSING:
            if update_workload is not None:
                update_workload(datacenter, current_time)
            next_time = on_resource_tick(datacenter, current_time)
            if not math.isinf(next_time):
                if next_time <= current_time:
                    next_time = current_time + parameters["scheduling_interval"]
                schedule_at(clock, next_time, RESOURCE_PROCESSING)
            else:
                status = "no vms"

        elif kind == MIGRATION_COMPLETION:
            on_migration_complete(datacenter, data, current_time, migrations_log_file)

        elif kind == LOCAL_TUNING:
            on_local_tuning_tick(datacenter, current_time)
            schedule_at(clock, current_time + parameters["local_interval"], LOCAL_TUNING)

        elif kind == GLOBAL_TUNING:
            performance = {}
            migration = on_global_tuning_tick(
                datacenter, current_time, migrations_log_file, performance
            )
            if migration is not None:
                schedule_at(
                    clock,
                    migration.completion_time,
                    migration_tag(migration.vm_id),
                    migration,
                )
                status = "migration started"
            else:
                status = "no migration"
            schedule_at(
                clock, current_time + parameters["global_interval"], GLOBAL_TUNING
            )
            for component, time_taken in performance.items():
                log_performance(
                    current_time,
                    component,
                    time_taken,
                    "done",
                    num_vms,
                    num_hosts,
                    performance_log_file,
                )

        log_performance(
            current_time,
            kind,
            time.time() - start_time,
            status,
            num_vms,
            num_hosts,
            performance_log_file,
        )
        fired.append(kind)

        if kind == RESOURCE_PROCESSING:
            log_step(
                current_time,
                datacenter,
                datacenter["s"]["time_frame_energy"],
                datacenter["s"]["host_energy"],
                print_to_console,
                log_folder_path,
                save_logs,
            )

    return fired


@profile
def simulate(
    datacenter,
    clock,
    simulation_limit=SIMULATION_LIMIT,
    update_workload=None,
    print_to_console=PRINT_TO_CONSOLE,
    log_folder_path=None,
    save_logs=SAVE_LOGS,
    performance_log_file=None,
    migrations_log_file=None,
):
    """
    Drive the engine timer by timer until the next due time passes
    simulation_limit, checking the fleet invariants after every step.

    Returns a summary dictionary with the total energy, the migration counters
    and the number of ticks of every kind.
    """
    if datacenter["s"]["state"] == "uninitialized":
        initialize_engine(datacenter, clock)

    ticks = {
        RESOURCE_PROCESSING: 0,
        LOCAL_TUNING: 0,
        GLOBAL_TUNING: 0,
        MIGRATION_COMPLETION: 0,
    }

    print(color_text("Initialization done", Fore.CYAN))
    while True:
        next_time = next_due_time(clock)
        if math.isinf(next_time) or next_time > simulation_limit:
            break
        advance(clock, next_time)

        for kind in run_step(
            datacenter,
            clock,
            update_workload,
            print_to_console,
            log_folder_path,
            save_logs,
            performance_log_file,
            migrations_log_file,
        ):
            ticks[kind] += 1

        run_checks(datacenter)

    return {
        "simulated_time": now(clock),
        "total_energy": datacenter["power"],
        "migration_count": datacenter["migration_count"],
        "dropped_migrations": datacenter["dropped_migrations"],
        "rejected_migrations": datacenter["rejected_migrations"],
        "in_flight_migrations": len(datacenter["migrations"]),
        "resource_ticks": ticks[RESOURCE_PROCESSING],
        "local_tuning_ticks": ticks[LOCAL_TUNING],
        "global_tuning_ticks": ticks[GLOBAL_TUNING],
        "completed_migration_events": ticks[MIGRATION_COMPLETION],
    }
