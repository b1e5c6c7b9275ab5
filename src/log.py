import csv
import datetime
import os

from colorama import Fore, Style, init

from config import LOGS_FOLDER_PATH
from datacenter import (
    get_utilization_mad,
    get_utilization_mean,
    get_utilization_variance,
    get_vms_on_host,
)
from weights import ws_to_kWh

try:
    profile  # type: ignore
except NameError:

    def profile(func):
        return func


init(autoreset=True, strip=False)


def create_log_folder(logs_folder_path=LOGS_FOLDER_PATH):
    current_datetime = datetime.datetime.now()
    date_time_string = current_datetime.strftime("%Y-%m-%d_%H:%M:%S")
    log_folder_name = f"log_{date_time_string}"
    log_folder_path = os.path.join(logs_folder_path, log_folder_name)
    os.makedirs(log_folder_path, exist_ok=True)

    performance_log_file = os.path.join(log_folder_path, "performance.csv")
    migrations_log_file = os.path.join(log_folder_path, "migrations.csv")

    with open(performance_log_file, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["Time", "Component", "Duration", "Status", "Num VMs", "Num Hosts"])

    with open(migrations_log_file, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(
            ["Time", "VM ID", "Source Host", "Target Host", "Event", "Delay", "Cost Diff"]
        )

    return log_folder_path, performance_log_file, migrations_log_file


def log_performance(
    current_time, component, time_taken, status, num_vms, num_hosts, performance_log_file
):
    if performance_log_file is None:
        return
    with open(performance_log_file, "a", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([current_time, component, time_taken, status, num_vms, num_hosts])


def log_migration(current_time, migration, event, migrations_log_file):
    if migrations_log_file is None:
        return
    source_host = "" if migration.source_host_id is None else migration.source_host_id
    with open(migrations_log_file, "a", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(
            [
                current_time,
                migration.vm_id,
                source_host,
                migration.target_host_id,
                event,
                migration.completion_delay,
                migration.cost_diff,
            ]
        )


@profile
def log_step(
    current_time,
    datacenter,
    time_frame_energy,
    host_energy,
    print_to_console=True,
    log_folder_path=None,
    save_logs=True,
):
    log_lines = []
    console_lines = []

    def log_line(parts):
        file_line = ""
        console_line = ""

        for text, color, bold in parts:
            file_line += text

            # Add color and bold formatting for the console
            if bold:
                text = f"{Style.BRIGHT}{text}{Style.RESET_ALL}"
            if color:
                text = f"{color}{text}{Style.RESET_ALL}"

            console_line += text

        log_lines.append(file_line)
        console_lines.append(console_line)

    log_line([(f"====== Time: {current_time:.2f} ======", Fore.LIGHTRED_EX, True)])

    log_line([("Hosts:", Fore.MAGENTA, True)])
    for host_id, host in datacenter["hosts"].items():
        migrating_in = host["s"]["migrating_in"]
        log_line(
            [
                ("  Host ID: ", Fore.YELLOW if migrating_in else None, True),
                (f"{host_id}", Fore.YELLOW if migrating_in else None, False),
                (", Utilization: ", None, True),
                (
                    f"{host['s']['previous_cpu_utilization'] * 100:.2f}% -> {host['s']['cpu_utilization'] * 100:.2f}%",
                    None,
                    False,
                ),
                (", Energy: ", None, True),
                (f"{host_energy.get(host_id, 0.0):.2f} W*sec", None, False),
                (", VMs: ", None, True),
                (f"{host['vms']}", None, False),
                (
                    f" (incoming: {migrating_in})" if migrating_in else "",
                    Fore.YELLOW,
                    False,
                ),
            ]
        )
        for vm in get_vms_on_host(datacenter, host):
            log_line(
                [
                    ("    VM ID: ", None, True),
                    (f"{vm['id']}", None, False),
                    (", Workload: ", None, True),
                    (f"{vm['workload']}", None, False),
                    (", Weight: ", None, True),
                    (f"{vm['tuning']['workload_weight']:.2f}", None, False),
                    (", Share MIPS/RAM/BW: ", None, True),
                    (
                        f"{vm['allocated']['mips']:.0f}/{vm['allocated']['ram']:.0f}/{vm['allocated']['bw']:.0f}",
                        None,
                        False,
                    ),
                    (", Mean Utilization: ", None, True),
                    (f"{get_utilization_mean(vm):.2f} MIPS", None, False),
                    (", Variance: ", None, True),
                    (f"{get_utilization_variance(vm):.2f}", None, False),
                    (", MAD: ", None, True),
                    (f"{get_utilization_mad(vm):.4f}", None, False),
                ]
            )

    if datacenter["migrations"]:
        log_line([("Migrating Virtual Machines:", Fore.LIGHTMAGENTA_EX, True)])
        for migration in datacenter["migrations"].values():
            log_line(
                [
                    ("  VM ID: ", Fore.LIGHTMAGENTA_EX, True),
                    (f"{migration.vm_id}", None, False),
                    (", Migrating from Host: ", None, True),
                    (f"{migration.source_host_id}", None, False),
                    (" to Host: ", None, True),
                    (f"{migration.target_host_id}", None, False),
                    (", Completion Time: ", None, True),
                    (f"{migration.completion_time:.2f}", None, False),
                ]
            )

    log_line(
        [
            ("\nData center's energy for the time frame: ", Fore.GREEN, True),
            (f"{time_frame_energy:.2f} W*sec", Fore.GREEN, True),
        ]
    )
    log_line(
        [
            ("Total energy: ", Fore.GREEN, True),
            (f"{datacenter['power']:.2f} W*sec", Fore.GREEN, True),
        ]
    )
    log_line([("=============================", Fore.LIGHTRED_EX, True)])

    # Save log to file (without colors and bold formatting)
    if save_logs and log_folder_path:
        log_file_path = os.path.join(log_folder_path, f"step_{current_time:.0f}.log")
        with open(log_file_path, "w") as log_file:
            log_file.write("\n".join(log_lines))

    # Print to console (with colors and bold formatting)
    if print_to_console:
        print("\n".join(console_lines))


def log_final_summary(summary, log_folder_path=None):
    total_energy = summary["total_energy"]

    final_energy_message = f"Total Energy: {total_energy:.2f} W*sec ({total_energy * ws_to_kWh:.4f} kWh)"
    migrations_message = f"Completed migrations: {summary['migration_count']}"
    dropped_message = f"Dropped migrations: {summary['dropped_migrations']}"
    rejected_message = f"Rejected migrations: {summary['rejected_migrations']}"
    ticks_message = (
        f"Ticks: resource {summary['resource_ticks']}, "
        f"local tuning {summary['local_tuning_ticks']}, "
        f"global tuning {summary['global_tuning_ticks']}"
    )
    simulated_time_message = f"Simulated time: {summary['simulated_time']:.2f} seconds"

    print(f"\n{Fore.GREEN}{Style.BRIGHT}\033[4m{final_energy_message}{Style.RESET_ALL}\n")
    print(migrations_message)
    print(dropped_message)
    print(rejected_message)
    print(ticks_message)
    print(simulated_time_message)

    # Save to log file (without colors)
    if log_folder_path:
        log_file_path = os.path.join(log_folder_path, "final_summary.log")
        with open(log_file_path, "a") as log_file:
            log_file.write(simulated_time_message + "\n")
            log_file.write(ticks_message + "\n")
            log_file.write("=============================\n")
            log_file.write(migrations_message + "\n")
            log_file.write(dropped_message + "\n")
            log_file.write(rejected_message + "\n")
            log_file.write("------------------------------------------\n")
            log_file.write(final_energy_message + "\n")
