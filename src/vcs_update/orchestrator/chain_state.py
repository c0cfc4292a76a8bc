from __future__ import annotations

import operator
from typing import Annotated
from typing_extensions import TypedDict

from vcs_update.core.errors import ProviderOperationError
from vcs_update.core.types import Outcome

from .rounds import RoundResult


class ChainState(TypedDict, total=False):
    round_number: int

    # Latest round only; replaced every round.
    round: RoundResult

    # Accumulated over the whole chain
    errors: Annotated[list[ProviderOperationError], operator.add]

    # Decision after each round
    proceed: bool
    outcome: Outcome
