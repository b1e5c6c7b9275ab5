"""
Adaptive workload prediction and local resource share tuning.

Every VM keeps a propensity score per discretized workload level. Once per
local tuning interval the scores are reinforced with an experience-weighted
rule driven by the last observed workload, the most likely level becomes the
VM's predicted workload, and each host's resources are shared among its VMs
in proportion to their predicted workload weights.
"""

import numpy as np
from colorama import Fore

from config import (
    ACCURACY_OUT_OF_RANGE_REWARD,
    EXPLORATION_RATE,
    MIN_VM_SHARE,
    RESOURCE_SHARE_FACTOR,
    SCALING_PARAMETER,
    SOLE_VM_SHARE,
    WORKLOAD_DOWN,
    WORKLOAD_UP,
)
from utils import color_text, round_half_up
from weights import accuracy

try:
    profile  # type: ignore
except NameError:

    def profile(func):
        return func


def create_tuning_record(
    workload_down=WORKLOAD_DOWN,
    workload_up=WORKLOAD_UP,
    scaling_parameter=SCALING_PARAMETER,
):
    levels = list(range(workload_down, workload_up + 1))
    num_levels = len(levels)
    initial_propensity = scaling_parameter * (workload_up - workload_down) / 2 / num_levels
    return {
        "levels": levels,
        "propensity": [initial_propensity] * num_levels,
        "probability": [1 / num_levels] * num_levels,
        "workload_weight": 0.0,
    }


def get_accuracy(propensity, out_of_range_reward=ACCURACY_OUT_OF_RANGE_REWARD):
    index = round_half_up(propensity)
    if 0 <= index < len(accuracy):
        return accuracy[index]

    print(
        color_text(
            f"Propensity {propensity:.4f} is out of the accuracy table range, using reward {out_of_range_reward}.",
            Fore.YELLOW,
        )
    )
    return out_of_range_reward


def calculate_experience(
    propensity,
    level,
    last_workload,
    num_levels,
    exploration_rate=EXPLORATION_RATE,
    out_of_range_reward=ACCURACY_OUT_OF_RANGE_REWARD,
):
    if level == last_workload:
        return get_accuracy(propensity, out_of_range_reward) * (1 - exploration_rate)
    if num_levels < 2:
        return 0.0
    return propensity * exploration_rate / (num_levels - 1)


def update_propensity(
    tuning,
    last_workload,
    exploration_rate=EXPLORATION_RATE,
    out_of_range_reward=ACCURACY_OUT_OF_RANGE_REWARD,
):
    previous_propensity = list(tuning["propensity"])
    num_levels = len(previous_propensity)

    new_propensity = [
        max(
            0.0,
            propensity
            + calculate_experience(
                propensity,
                level,
                last_workload,
                num_levels,
                exploration_rate,
                out_of_range_reward,
            ),
        )
        for propensity, level in zip(previous_propensity, tuning["levels"])
    ]

    total = sum(new_propensity)
    if total > 0:
        new_probability = [propensity / total for propensity in new_propensity]
    else:
        print(
            color_text(
                "All propensities dropped to zero, restoring a uniform probability vector.",
                Fore.YELLOW,
            )
        )
        new_probability = [1 / num_levels] * num_levels

    tuning["propensity"] = new_propensity
    tuning["probability"] = new_probability


def predict_workload_level(tuning):
    # np.argmax keeps the first of tied maxima
    return tuning["levels"][int(np.argmax(tuning["propensity"]))]


def calculate_resource_share(
    weight,
    sole_vm_share=SOLE_VM_SHARE,
    min_vm_share=MIN_VM_SHARE,
    resource_share_factor=RESOURCE_SHARE_FACTOR,
):
    if weight == 1.0:
        return sole_vm_share * resource_share_factor
    if weight == 0.0:
        return min_vm_share * resource_share_factor
    return weight * resource_share_factor


def normalize_workload_weights(vms):
    total = sum(vm["tuning"]["workload_weight"] for vm in vms)
    if total <= 0:
        return {vm["id"]: 0.0 for vm in vms}
    return {vm["id"]: vm["tuning"]["workload_weight"] / total for vm in vms}


def assign_resource_shares(host, vms, parameters):
    weights = normalize_workload_weights(vms)
    if vms and not any(weights.values()):
        print(
            color_text(
                f"Host #{host['id']} has zero total workload weight, every VM gets the minimum share.",
                Fore.YELLOW,
            )
        )

    for vm in vms:
        share = calculate_resource_share(
            weights[vm["id"]],
            parameters["sole_vm_share"],
            parameters["min_vm_share"],
            parameters["resource_share_factor"],
        )
        vm["allocated"]["ram"] = host["capacity"]["ram"] * share
        vm["allocated"]["mips"] = host["capacity"]["mips"] * share
        vm["allocated"]["bw"] = host["capacity"]["bw"] * share

    return weights


@profile
def tune_host(datacenter, host):
    parameters = datacenter["parameters"]
    vms = [datacenter["vms"][vm_id] for vm_id in host["vms"]]

    for vm in vms:
        tuning = vm["tuning"]
        try:
            update_propensity(
                tuning,
                vm["workload"],
                parameters["exploration_rate"],
                parameters["accuracy_out_of_range_reward"],
            )
            tuning["workload_weight"] = vm["application_impact"] * predict_workload_level(
                tuning
            )
        except (ValueError, ArithmeticError) as e:
            print(
                color_text(
                    f"Local tuning of VM #{vm['id']} on Host #{host['id']} failed: {e}",
                    Fore.RED,
                )
            )

    return assign_resource_shares(host, vms, parameters)


def run_local_tuning(datacenter, current_time):
    weights = {}
    for host in datacenter["hosts"].values():
        try:
            weights.update(tune_host(datacenter, host))
        except (ValueError, ArithmeticError) as e:
            print(
                color_text(
                    f"{current_time:.2f}: Local tuning of Host #{host['id']} failed: {e}",
                    Fore.RED,
                )
            )
    return weights
