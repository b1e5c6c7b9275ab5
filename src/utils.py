import math
import os

import numpy as np
import pandas as pd
from colorama import Style

from config import HOST_DATABASE_FILE

try:
    profile  # type: ignore
except NameError:

    def profile(func):
        return func


# Check if NO_COLOR environment variable is set
NO_COLOR = os.environ.get("NO_COLOR", "0") == "1"

LOAD_LEVELS = [0.0, 0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 1.0]


def load_host_database(file_path=HOST_DATABASE_FILE):
    if not os.path.exists(file_path):
        raise ValueError(
            f"File {file_path} not found. Please provide a host power database."
        )

    df = pd.read_csv(file_path, encoding="ISO-8859-1")

    power_function_database = {}
    for _, row in df.iterrows():
        host_type = int(row["Host Type"])
        power_function = {0.0: float(row["Average watts @ active idle"])}
        for level in LOAD_LEVELS[1:]:
            power_function[level] = float(
                row[f"Average watts @ {round(level * 100)}% of target load"]
            )

        if any(power < 0 for power in power_function.values()):
            raise ValueError(
                f"Power function of host type {host_type} has negative values: {power_function}"
            )
        power_function_database[host_type] = power_function

    return power_function_database


def color_text(text, color):
    if NO_COLOR:
        return text
    return f"{color}{text}{Style.RESET_ALL}"


def evaluate_piecewise_linear_function(piecewise_function, x_value):
    """
    Evaluate a piecewise linear function at a given x_value.
    """
    if not isinstance(x_value, (int, float)):
        raise TypeError("Input x must be a numeric type.")

    if not 0.0 <= x_value <= 1.0:
        raise ValueError(f"x = {x_value} must be between 0.0 and 1.0 inclusive.")

    x_points = sorted(piecewise_function.keys())
    y_points = [piecewise_function[xi] for xi in x_points]

    return float(np.interp(x_value, x_points, y_points))


def round_half_up(value):
    return int(math.floor(value + 0.5))
