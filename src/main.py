import argparse
import csv
import importlib.util
import os
import sys
import time

import numpy as np

from clock import create_clock
from data_generator import generate_datacenter, update_workload
from log import create_log_folder, log_final_summary
from simulation import load_parameters, simulate
from utils import load_host_database

# Parse command-line arguments
parser = argparse.ArgumentParser()
parser.add_argument(
    "--config", default="src/config.py", help="Path to the configuration file"
)
parser.add_argument("--hosts", type=int, help="Number of hosts to generate")
parser.add_argument("--vms", type=int, help="Number of VMs to generate")
parser.add_argument(
    "--disable-migrations",
    action="store_true",
    help="Run local tuning only, without the global migration optimizer",
)
args = parser.parse_args()

# Dynamically import the config file
spec = importlib.util.spec_from_file_location("config", args.config)
config = importlib.util.module_from_spec(spec)

try:
    spec.loader.exec_module(config)
except FileNotFoundError:
    print(f"Configuration file {args.config} not found.")
    sys.exit(1)
except Exception as e:
    print(f"Error loading configuration file: {e}")
    sys.exit(1)

# Access configuration constants using the config object
USE_RANDOM_SEED = getattr(config, "USE_RANDOM_SEED", None)
SEED_NUMBER = getattr(config, "SEED_NUMBER", None)
PRINT_TO_CONSOLE = getattr(config, "PRINT_TO_CONSOLE", None)
SAVE_LOGS = getattr(config, "SAVE_LOGS", None)
NUMBER_OF_HOSTS = args.hosts if args.hosts else getattr(config, "NUMBER_OF_HOSTS", None)
NUMBER_OF_VMS = args.vms if args.vms else getattr(config, "NUMBER_OF_VMS", None)
HOST_COMPOSITION = getattr(config, "HOST_COMPOSITION", None)
HOST_TYPES = getattr(config, "HOST_TYPES", None)
VM_TYPES = getattr(config, "VM_TYPES", None)
SIMULATION_LIMIT = getattr(config, "SIMULATION_LIMIT", None)
LOGS_FOLDER_PATH = getattr(config, "LOGS_FOLDER_PATH", None)
HOST_DATABASE_FILE = getattr(config, "HOST_DATABASE_FILE", None)

if USE_RANDOM_SEED:
    np.random.seed(SEED_NUMBER)

# Ensure the directories exist
os.makedirs(LOGS_FOLDER_PATH, exist_ok=True)

if __name__ == "__main__":
    total_start_time = time.time()  # Record the start time

    parameters = load_parameters(config)
    if args.hosts and not hasattr(config, "COST_BASE"):
        parameters["cost_base"] = NUMBER_OF_HOSTS
    if args.disable_migrations:
        parameters["disable_migrations"] = True

    power_function_database = load_host_database(HOST_DATABASE_FILE)
    datacenter, placed, failed = generate_datacenter(
        parameters,
        power_function_database,
        NUMBER_OF_HOSTS,
        NUMBER_OF_VMS,
        HOST_COMPOSITION,
        HOST_TYPES,
        VM_TYPES,
    )
    if failed:
        print(f"Initial placement failed for VMs {failed}, aborting.")
        sys.exit(1)
    print(f"Placed {len(placed)} VMs on {NUMBER_OF_HOSTS} hosts")

    log_folder_path, performance_log_file, migrations_log_file = create_log_folder(
        LOGS_FOLDER_PATH
    )

    summary = simulate(
        datacenter,
        create_clock(),
        SIMULATION_LIMIT,
        update_workload,
        PRINT_TO_CONSOLE,
        log_folder_path,
        SAVE_LOGS,
        performance_log_file,
        migrations_log_file,
    )

    log_final_summary(summary, log_folder_path)

    total_end_time = time.time()  # Record the end time
    total_execution_time = total_end_time - total_start_time
    with open(performance_log_file, "a", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["Total Execution Time", total_execution_time])
    print(f"Total execution time: {total_execution_time} seconds")
