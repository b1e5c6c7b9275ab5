from weights import EPSILON


def check_unique_placement(datacenter):
    placed = {}
    for host_id, host in datacenter["hosts"].items():
        for vm_id in host["vms"]:
            if vm_id in placed:
                raise ValueError(
                    f"VM {vm_id} is placed on both host {placed[vm_id]} and host {host_id}."
                )
            placed[vm_id] = host_id
            if datacenter["vms"][vm_id]["host"] != host_id:
                raise ValueError(
                    f"VM {vm_id} is listed on host {host_id} but refers to host {datacenter['vms'][vm_id]['host']}."
                )


def check_probability_vectors(datacenter):
    for vm in datacenter["vms"].values():
        probability = vm["tuning"]["probability"]
        if any(p < 0 for p in probability):
            raise ValueError(f"VM {vm['id']} has a negative probability: {probability}.")
        if abs(sum(probability) - 1) > EPSILON:
            raise ValueError(
                f"VM {vm['id']} probabilities sum to {sum(probability)}, expected 1."
            )


def check_propensity_non_negative(datacenter):
    for vm in datacenter["vms"].values():
        if any(p < 0 for p in vm["tuning"]["propensity"]):
            raise ValueError(
                f"VM {vm['id']} has a negative propensity: {vm['tuning']['propensity']}."
            )


def check_history_length(datacenter):
    history_length = datacenter["parameters"]["history_length"]
    for vm in datacenter["vms"].values():
        if len(vm["utilization_history"]) > history_length:
            raise ValueError(
                f"VM {vm['id']} keeps {len(vm['utilization_history'])} utilization samples, limit is {history_length}."
            )


def check_single_in_flight_migration(datacenter):
    incoming = {}
    for host_id, host in datacenter["hosts"].items():
        for vm_id in host["s"]["migrating_in"]:
            if vm_id in incoming:
                raise ValueError(
                    f"VM {vm_id} is migrating to both host {incoming[vm_id]} and host {host_id}."
                )
            incoming[vm_id] = host_id

    for vm_id, migration in datacenter["migrations"].items():
        if incoming.get(vm_id) != migration.target_host_id:
            raise ValueError(
                f"VM {vm_id} is migrating to host {migration.target_host_id}, but that host does not expect it."
            )
        if migration.target_host_id == migration.source_host_id:
            raise ValueError(
                f"VM {vm_id} is migrating to the same host {migration.target_host_id}."
            )

    for vm_id in incoming:
        if vm_id not in datacenter["migrations"]:
            raise ValueError(f"Host {incoming[vm_id]} expects VM {vm_id}, which is not migrating.")


def validate_parameters(parameters):
    for name in ("scheduling_interval", "local_interval", "global_interval"):
        if parameters[name] <= 0:
            raise ValueError(f"{name} must be positive, got {parameters[name]}.")
    if parameters["workload_up"] < parameters["workload_down"]:
        raise ValueError(
            f"workload_up ({parameters['workload_up']}) is below workload_down ({parameters['workload_down']})."
        )
    if not 0 <= parameters["exploration_rate"] < 1:
        raise ValueError(
            f"exploration_rate must be in [0, 1), got {parameters['exploration_rate']}."
        )
    if not 0 < parameters["resource_share_factor"] <= 1:
        raise ValueError(
            f"resource_share_factor must be in (0, 1], got {parameters['resource_share_factor']}."
        )
    if parameters["history_length"] <= 0:
        raise ValueError(
            f"history_length must be positive, got {parameters['history_length']}."
        )


def run_checks(datacenter):
    check_unique_placement(datacenter)
    check_probability_vectors(datacenter)
    check_propensity_non_negative(datacenter)
    check_history_length(datacenter)
    check_single_in_flight_migration(datacenter)
