"""Protocol setup: master configuration, DLMM parameter whitelists and bin caches."""

from dloom.accounts import DlmmParameter, DlmmParameters, ProtocolConfig, TransactionBins
from dloom.errors import DloomError, ErrorCode
from dloom.events import DlmmParametersUpdated, ParameterAction, ParameterList

# The parameters account is sized for 2 x 20 entries; both lists share that room.
MAX_DLMM_PARAMETERS = 40
# The transaction-bins account is sized for 70 bin addresses.
MAX_TRANSACTION_BINS = 70


def _check_parameter_capacity(official, community):
    if len(official) + len(community) > MAX_DLMM_PARAMETERS:
        raise ValueError(
            f"at most {MAX_DLMM_PARAMETERS} whitelisted parameters fit in the account"
        )


def initialize_protocol(authority):
    """Create the protocol configuration with its master authority."""
    return ProtocolConfig(authority=authority)


def initialize_dlmm_parameters(authority, official_params, community_params):
    """Create the whitelist of (bin_step, fee_rate) pairs for DLMM pools."""
    official = list(official_params)
    community = list(community_params)
    _check_parameter_capacity(official, community)
    return DlmmParameters(
        authority=authority,
        official_parameters=official,
        community_parameters=community,
    )


def update_dlmm_parameters(config, parameters, authority, list_kind, action, bin_step, fee_rate):
    """Add a pair to, or remove it from, one whitelist; returns DlmmParametersUpdated."""
    if config.authority != authority or parameters.authority != authority:
        raise DloomError(ErrorCode.UNAUTHORIZED)

    if list_kind is ParameterList.OFFICIAL:
        target = parameters.official_parameters
    elif list_kind is ParameterList.COMMUNITY:
        target = parameters.community_parameters
    else:
        raise ValueError(f"unknown parameter list: {list_kind!r}")

    new_param = DlmmParameter(bin_step=bin_step, fee_rate=fee_rate)
    if action is ParameterAction.ADD:
        if new_param not in target:
            other = (
                parameters.community_parameters
                if target is parameters.official_parameters
                else parameters.official_parameters
            )
            _check_parameter_capacity(target + [new_param], other)
            target.append(new_param)
    elif action is ParameterAction.REMOVE:
        target[:] = [param for param in target if param != new_param]
    else:
        raise ValueError(f"unknown parameter action: {action!r}")

    return DlmmParametersUpdated(
        list=list_kind, action=action, bin_step=bin_step, fee_rate=fee_rate
    )


def setup_bins(owner, bin_addresses):
    """Record the bin addresses the owner's next liquidity or swap instruction uses."""
    bins = list(bin_addresses)
    if len(bins) > MAX_TRANSACTION_BINS:
        raise ValueError(f"at most {MAX_TRANSACTION_BINS} bins fit in one transaction")
    return TransactionBins(owner=owner, bins=bins)