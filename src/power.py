from colorama import Fore

from utils import color_text, evaluate_piecewise_linear_function


def calculate_host_energy(power_function, utilization_start, utilization_end, elapsed):
    """
    Energy in W*s between two utilization samples, using a linear
    interpolation of the power drawn at both ends.
    """
    if elapsed < 0:
        raise ValueError(f"Elapsed time must not be negative, got {elapsed}.")
    if elapsed == 0:
        return 0.0

    power_start = evaluate_piecewise_linear_function(power_function, utilization_start)
    power_end = evaluate_piecewise_linear_function(power_function, utilization_end)
    return (power_start + (power_end - power_start) / 2) * elapsed


def get_host_energy(datacenter, host, elapsed):
    if host["s"]["num_samples"] == 0:
        raise ValueError(
            f"Host {host['id']} has no utilization sample, cannot account its energy."
        )
    return calculate_host_energy(
        datacenter["power_functions"][host["type"]],
        host["s"]["previous_cpu_utilization"],
        host["s"]["cpu_utilization"],
        elapsed,
    )


def update_power_accounting(datacenter, current_time):
    """
    Accumulate the energy consumed by every host since the last resource
    tick. Returns the data center energy of the time frame and the energy of
    each host.
    """
    elapsed = current_time - datacenter["s"]["last_process_time"]
    time_frame_energy = 0.0
    host_energy = {}

    if elapsed > 0:
        for host_id, host in datacenter["hosts"].items():
            try:
                energy = get_host_energy(datacenter, host, elapsed)
            except (ValueError, ArithmeticError) as e:
                print(
                    color_text(
                        f"{current_time:.2f}: [Host #{host_id}] energy accounting failed: {e}",
                        Fore.RED,
                    )
                )
                continue
            host["s"]["energy"] += energy
            host_energy[host_id] = energy
            time_frame_energy += energy

    datacenter["power"] += time_frame_energy
    datacenter["s"]["time_frame_energy"] = time_frame_energy
    datacenter["s"]["host_energy"] = host_energy
    return time_frame_energy, host_energy
