import pytest

from clock import create_clock
from datacenter import update_hosts_processing
from power import calculate_host_energy, get_host_energy, update_power_accounting
from simulation import initialize_engine, on_resource_tick


def test_trapezoidal_energy():
    power_function = {0.0: 100.0, 1.0: 200.0}

    assert calculate_host_energy(power_function, 0.0, 1.0, 10) == pytest.approx(1500.0)
    assert calculate_host_energy(power_function, 0.5, 0.5, 10) == pytest.approx(1500.0)


def test_zero_elapsed_time_has_no_energy():
    assert calculate_host_energy({0.0: 100.0, 1.0: 200.0}, 0.2, 0.9, 0) == 0.0


def test_negative_elapsed_time_raises():
    with pytest.raises(ValueError):
        calculate_host_energy({0.0: 100.0, 1.0: 200.0}, 0.2, 0.9, -1)


def test_energy_needs_a_utilization_sample(build_datacenter):
    datacenter = build_datacenter({0: [0]})

    with pytest.raises(ValueError, match="no utilization sample"):
        get_host_energy(datacenter, datacenter["hosts"][0], 300)


def test_accumulated_energy_never_decreases(build_datacenter):
    datacenter = build_datacenter({0: [0, 1], 1: [2]})
    clock = create_clock()
    initialize_engine(datacenter, clock)

    totals = []
    for step, requested_mips in enumerate([0, 400, 900, 100, 0, 500]):
        for vm in datacenter["vms"].values():
            vm["requested"]["mips"] = requested_mips
        on_resource_tick(datacenter, step * 300.0)
        totals.append(datacenter["power"])

    assert totals[0] == 0.0
    assert all(later > earlier for earlier, later in zip(totals, totals[1:]))
    assert datacenter["power"] == pytest.approx(
        sum(host["s"]["energy"] for host in datacenter["hosts"].values())
    )


def test_failing_host_does_not_block_the_others(build_datacenter, capsys):
    datacenter = build_datacenter({0: [0], 1: [1]})
    update_hosts_processing(datacenter, 0.0)
    datacenter["hosts"][1]["s"]["num_samples"] = 0

    time_frame_energy, host_energy = update_power_accounting(datacenter, 10.0)

    assert list(host_energy) == [0]
    assert time_frame_energy == pytest.approx(100.0 * 10)
    assert "[Host #1] energy accounting failed" in capsys.readouterr().out
