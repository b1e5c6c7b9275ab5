import pytest

import local_tuning
from local_tuning import (
    calculate_resource_share,
    create_tuning_record,
    get_accuracy,
    normalize_workload_weights,
    predict_workload_level,
    run_local_tuning,
    tune_host,
    update_propensity,
)
from weights import accuracy


def test_initial_tuning_record():
    tuning = create_tuning_record(1, 10, 1.0)

    assert tuning["levels"] == list(range(1, 11))
    assert tuning["propensity"] == [pytest.approx(0.45)] * 10
    assert sum(tuning["probability"]) == pytest.approx(1.0)


def test_update_uses_the_pre_update_snapshot():
    tuning = create_tuning_record(1, 10, 1.0)

    update_propensity(tuning, 3, exploration_rate=0.05)

    # round(0.45) hits the first accuracy entry, which rewards nothing
    assert tuning["propensity"][2] == pytest.approx(0.45)
    for index in (0, 1, 3, 9):
        assert tuning["propensity"][index] == pytest.approx(0.45 + 0.45 * 0.05 / 9)
    assert tuning["probability"][2] == pytest.approx(0.45 / sum(tuning["propensity"]))


def test_probability_stays_a_distribution():
    tuning = create_tuning_record(1, 10, 1.0)

    for workload in [3, 3, 5, 10, 1, 3, 3, 3, 7, 12, 0, 3] * 5:
        update_propensity(tuning, workload)
        assert sum(tuning["probability"]) == pytest.approx(1.0)
        assert all(p >= 0 for p in tuning["probability"])
        assert all(p >= 0 for p in tuning["propensity"])


def test_reinforced_level_is_predicted():
    tuning = create_tuning_record(1, 10, 1.0)
    tuning["propensity"][4] = 2.0

    for _ in range(5):
        update_propensity(tuning, 5)

    assert predict_workload_level(tuning) == 5


def test_prediction_ties_go_to_the_first_level():
    tuning = create_tuning_record(1, 10, 1.0)

    assert predict_workload_level(tuning) == 1


def test_accuracy_lookup_rounds_half_up():
    assert get_accuracy(1.4) == pytest.approx(accuracy[1])
    assert get_accuracy(1.5) == pytest.approx(accuracy[2])
    assert get_accuracy(21.2) == pytest.approx(accuracy[21])


def test_accuracy_out_of_range_uses_configured_reward(capsys):
    assert get_accuracy(30.0, out_of_range_reward=0.25) == 0.25
    assert "out of the accuracy table range" in capsys.readouterr().out


def test_zero_propensity_restores_uniform_probability(capsys):
    tuning = create_tuning_record(1, 4, 1.0)
    tuning["propensity"] = [0.0] * 4

    update_propensity(tuning, 9)

    assert tuning["probability"] == [0.25] * 4
    assert "uniform" in capsys.readouterr().out


def test_resource_share():
    assert calculate_resource_share(1.0, 0.95, 0.01, 0.5) == pytest.approx(0.475)
    assert calculate_resource_share(0.0, 0.95, 0.01, 0.5) == pytest.approx(0.005)
    assert calculate_resource_share(0.3, 0.95, 0.01, 0.5) == pytest.approx(0.15)


def test_sole_vm_gets_most_of_half_the_host(build_datacenter):
    datacenter = build_datacenter({0: [0]})
    datacenter["vms"][0]["workload"] = 3

    weights = tune_host(datacenter, datacenter["hosts"][0])

    assert weights == {0: 1.0}
    assert datacenter["vms"][0]["allocated"]["ram"] == pytest.approx(0.95 * 0.5 * 4096)
    assert datacenter["vms"][0]["allocated"]["mips"] == pytest.approx(0.95 * 0.5 * 2000)


def test_equal_weights_split_half_the_host(build_datacenter):
    datacenter = build_datacenter({0: [0, 1]})

    weights = tune_host(datacenter, datacenter["hosts"][0])

    assert weights == {0: 0.5, 1: 0.5}
    for vm_id in (0, 1):
        allocated = datacenter["vms"][vm_id]["allocated"]
        assert allocated["ram"] == pytest.approx(0.25 * 4096)
        assert allocated["mips"] == pytest.approx(0.25 * 2000)
        assert allocated["bw"] == pytest.approx(0.25 * 1000000)


def test_zero_total_weight_falls_back_to_floor_share(build_datacenter, capsys):
    datacenter = build_datacenter({0: [0, 1]})
    for vm in datacenter["vms"].values():
        vm["application_impact"] = 0.0

    weights = tune_host(datacenter, datacenter["hosts"][0])

    assert weights == {0: 0.0, 1: 0.0}
    for vm in datacenter["vms"].values():
        assert vm["allocated"]["ram"] == pytest.approx(0.01 * 0.5 * 4096)
    assert "zero total workload weight" in capsys.readouterr().out


def test_normalized_weights_sum_to_one(build_datacenter):
    datacenter = build_datacenter({0: [0, 1, 2]})
    for vm_id, weight in zip((0, 1, 2), (1.0, 4.0, 7.0)):
        datacenter["vms"][vm_id]["tuning"]["workload_weight"] = weight

    weights = normalize_workload_weights(list(datacenter["vms"].values()))

    assert sum(weights.values()) == pytest.approx(1.0)
    assert weights[2] == pytest.approx(7 / 12)


def test_failing_host_does_not_stop_the_others(build_datacenter, monkeypatch, capsys):
    datacenter = build_datacenter({0: [0], 1: [1]})
    original_tune_host = local_tuning.tune_host

    def tune_host_failing_on_first(datacenter, host):
        if host["id"] == 0:
            raise ValueError("broken host")
        return original_tune_host(datacenter, host)

    monkeypatch.setattr(local_tuning, "tune_host", tune_host_failing_on_first)

    weights = run_local_tuning(datacenter, 600.0)

    assert weights == {1: 1.0}
    assert "Local tuning of Host #0 failed: broken host" in capsys.readouterr().out


def test_failing_vm_does_not_stop_the_rest_of_its_host(build_datacenter, monkeypatch, capsys):
    datacenter = build_datacenter({0: [0, 1]})
    datacenter["vms"][0]["workload"] = 7
    datacenter["vms"][1]["workload"] = 3
    original_update_propensity = local_tuning.update_propensity

    def update_propensity_failing_on_seven(tuning, last_workload, *args):
        if last_workload == 7:
            raise ValueError("broken record")
        return original_update_propensity(tuning, last_workload, *args)

    monkeypatch.setattr(local_tuning, "update_propensity", update_propensity_failing_on_seven)

    weights = tune_host(datacenter, datacenter["hosts"][0])

    assert weights == {0: 0.0, 1: 1.0}
    assert datacenter["vms"][1]["allocated"]["ram"] == pytest.approx(0.95 * 0.5 * 4096)
    assert datacenter["vms"][0]["allocated"]["ram"] == pytest.approx(0.01 * 0.5 * 4096)
    assert "Local tuning of VM #0 on Host #0 failed: broken record" in capsys.readouterr().out
