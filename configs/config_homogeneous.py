import os

# Homogeneous fleet of HP ProLiant ML110 G4 hosts, tuned twice as often.
# Run with: python src/main.py --config configs/config_homogeneous.py

USE_RANDOM_SEED = True
SEED_NUMBER = 7
PRINT_TO_CONSOLE = False
SAVE_LOGS = True

NUMBER_OF_HOSTS = 20
NUMBER_OF_VMS = 30
HOST_COMPOSITION = "homogeneous"

HOST_TYPES = {
    0: {"mips": 1860, "pes": 2, "ram": 4096, "bw": 1000000},
}

SCHEDULING_INTERVAL = 300
LOCAL_INTERVAL = 300
GLOBAL_INTERVAL = 900
SIMULATION_LIMIT = 12 * 60 * 60

MIGRATION_THRESHOLD = 0.2
COST_BASE = NUMBER_OF_HOSTS
DISABLE_MIGRATIONS = False

WORKLOAD_DOWN = 1
WORKLOAD_UP = 8
EXPLORATION_RATE = 0.1

BASE_PATH = ""
LOGS_FOLDER_PATH = os.path.join(BASE_PATH, "logs")
HOST_DATABASE_FILE = os.path.join(BASE_PATH, "simulation/simulation_input/host_database.csv")
