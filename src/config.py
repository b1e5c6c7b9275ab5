import os

# General
USE_RANDOM_SEED = True
SEED_NUMBER = 1
PRINT_TO_CONSOLE = True
SAVE_LOGS = True

# Fleet
NUMBER_OF_HOSTS = 10
NUMBER_OF_VMS = 20
HOST_COMPOSITION = "heterogeneous"
# HOST_COMPOSITION = "homogeneous"

# Host types: HP ProLiant ML110 G4 (Intel Xeon 3040) and G5 (Intel Xeon 3075)
HOST_TYPES = {
    0: {"mips": 1860, "pes": 2, "ram": 4096, "bw": 1000000},
    1: {"mips": 2660, "pes": 2, "ram": 4096, "bw": 1000000},
}

# VM types: high-CPU medium, extra large, small, micro
VM_TYPES = {
    0: {"mips": 2500, "pes": 1, "ram": 870, "bw": 100000},
    1: {"mips": 2000, "pes": 1, "ram": 1740, "bw": 100000},
    2: {"mips": 1000, "pes": 1, "ram": 1740, "bw": 100000},
    3: {"mips": 500, "pes": 1, "ram": 613, "bw": 100000},
}

# Simulation parameters (in seconds)
SCHEDULING_INTERVAL = 300  # Resource processing and power accounting
LOCAL_INTERVAL = 600  # Adaptive workload prediction and share tuning
GLOBAL_INTERVAL = 1800  # Migration cost optimization
SIMULATION_LIMIT = 24 * 60 * 60

# Global tuning
MIGRATION_THRESHOLD = 0.1
COST_BASE = NUMBER_OF_HOSTS
DISABLE_MIGRATIONS = False

# Local tuning
WORKLOAD_DOWN = 1
WORKLOAD_UP = 10
SCALING_PARAMETER = 1.0
EXPLORATION_RATE = 0.05
ACCURACY_OUT_OF_RANGE_REWARD = 1.0

RESOURCE_SHARE_FACTOR = 0.5  # Half of every host resource is kept as headroom
SOLE_VM_SHARE = 0.95
MIN_VM_SHARE = 0.01

HISTORY_LENGTH = 30

# Paths
BASE_PATH = ""
SIMULATION_INPUT_FOLDER_PATH = os.path.join(BASE_PATH, "simulation/simulation_input")
LOGS_FOLDER_PATH = os.path.join(BASE_PATH, "logs")
HOST_DATABASE_FILE = os.path.join(SIMULATION_INPUT_FOLDER_PATH, "host_database.csv")
