# Reward differential for a level whose value matches the last observed workload,
# indexed by the rounded propensity of that level
accuracy = (
    0.0,
    1.00 - 0.82,
    1.95 - 1.64,
    2.85 - 2.46,
    3.70 - 3.28,
    4.50 - 4.10,
    5.25 - 4.92,
    5.95 - 5.74,
    6.60 - 6.56,
    7.20 - 7.38,
    7.75 - 8.20,
    8.25 - 9.02,
    8.70 - 9.84,
    9.10 - 10.66,
    9.45 - 11.48,
    9.75 - 12.30,
    10.00 - 13.12,
    10.25 - 13.94,
    10.35 - 14.76,
    10.45 - 15.58,
    10.50 - 16.40,
    10.50 - 21.22,
)

migration = {
    "bandwidth_share": 2,  # Half of the target bandwidth is left for VM traffic
    "bandwidth_to_ram_rate": 8000,  # Bandwidth units to RAM units per second
}

# Conversion factors
ws_to_kWh = 1 / (3.6 * 10**6)  # watt-seconds to kilowatt-hours

EPSILON = 0.00001
