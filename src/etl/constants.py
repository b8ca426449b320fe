"""Log format constants for the tendermint and abcid logs."""

from enum import StrEnum

# Tendermint (consensus) log
# I[2022-04-07|02:17:07.759] Executed block module=state height=191 validTxs=3368 invalidTxs=666
EXECUTED_BLOCK_MARKER = "Executed block"

TIMESTAMP_START = 2
TIMESTAMP_END = 25
TIMESTAMP_FORMAT = "%Y-%m-%d|%H:%M:%S.%f"

HEIGHT_KEY = "height"
VALID_TXS_KEY = "validTxs"
INVALID_TXS_KEY = "invalidTxs"

# Abcid (application) log
# tps,begin_block,31,31,td_height 781,end of begin_block
# tps,end_block,6,td_height 781,end of end_block
# tps,commit,2,60,62,td_height 781,end of commit
TPS_MARKER = "tps,"
TD_HEIGHT_TOKEN = "td_height"


class Phase(StrEnum):
    """Trailing marker of an abcid timing line."""

    BEGIN_BLOCK = "end of begin_block"
    END_BLOCK = "end of end_block"
    COMMIT = "end of commit"


# Field position (in the comma-split suffix) of each BlockRecord phase field
PHASE_FIELDS: dict[Phase, dict[str, int]] = {
    Phase.BEGIN_BLOCK: {"phase_snapshot": 2, "phase_begin": 3},
    Phase.END_BLOCK: {"phase_end": 2},
    Phase.COMMIT: {"phase_commit_evm": 3, "phase_commit": 4},
}
