from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping
import json
import logging

logger = logging.getLogger(__name__)

# Dealer up values as scored: 2-10, ace fixed at 11
DEALER_UP_VALUES = range(2, 12)
# Totals the table must cover; below is a forced hit, above a forced stand
TOTAL_RANGE = range(5, 18)
PAIR_VALUES = range(2, 12)


class GameError(Exception):
    """Custom exception for game-related errors"""
    pass


class StrategyLookupError(GameError):
    """Raised when the strategy table has no entry for a reachable game state.

    This is a defect in the table, not a condition a single game can recover
    from, so it is never caught inside the simulation.
    """

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"no move found for situation {key}")


class Action(Enum):
    HIT = "H"
    STAND = "S"
    DOUBLE = "D"
    SPLIT = "P"

    def __str__(self):
        return self.name.capitalize()


# Chart codes as printed on casino strategy cards. Composite codes collapse to
# the action this simulator can take: doubling and splitting are always
# allowed on the first decision, surrender never is.
CHART_CODES: Dict[str, Action] = {
    "H": Action.HIT,
    "S": Action.STAND,
    "D": Action.DOUBLE,
    "P": Action.SPLIT,
    "Dh": Action.DOUBLE,
    "Ds": Action.DOUBLE,
    "Ph": Action.SPLIT,
    "Rh": Action.HIT,
}

# Hard totals vs dealer up value (2-10, 11 = ace)
HARD_TOTALS = {
    17: {2:"S", 3:"S", 4:"S", 5:"S", 6:"S", 7:"S", 8:"S", 9:"S", 10:"S", 11:"S"},
    16: {2:"S", 3:"S", 4:"S", 5:"S", 6:"S", 7:"H", 8:"H", 9:"Rh", 10:"Rh", 11:"Rh"},
    15: {2:"S", 3:"S", 4:"S", 5:"S", 6:"S", 7:"H", 8:"H", 9:"H", 10:"Rh", 11:"H"},
    14: {2:"S", 3:"S", 4:"S", 5:"S", 6:"S", 7:"H", 8:"H", 9:"H", 10:"H", 11:"H"},
    13: {2:"S", 3:"S", 4:"S", 5:"S", 6:"S", 7:"H", 8:"H", 9:"H", 10:"H", 11:"H"},
    12: {2:"H", 3:"H", 4:"S", 5:"S", 6:"S", 7:"H", 8:"H", 9:"H", 10:"H", 11:"H"},
    11: {2:"Dh", 3:"Dh", 4:"Dh", 5:"Dh", 6:"Dh", 7:"Dh", 8:"Dh", 9:"Dh", 10:"Dh", 11:"H"},
    10: {2:"Dh", 3:"Dh", 4:"Dh", 5:"Dh", 6:"Dh", 7:"Dh", 8:"Dh", 9:"Dh", 10:"H", 11:"H"},
    9:  {2:"H", 3:"Dh", 4:"Dh", 5:"Dh", 6:"Dh", 7:"H", 8:"H", 9:"H", 10:"H", 11:"H"},
    8:  {2:"H", 3:"H", 4:"H", 5:"H", 6:"H", 7:"H", 8:"H", 9:"H", 10:"H", 11:"H"},
    7:  {2:"H", 3:"H", 4:"H", 5:"H", 6:"H", 7:"H", 8:"H", 9:"H", 10:"H", 11:"H"},
    6:  {2:"H", 3:"H", 4:"H", 5:"H", 6:"H", 7:"H", 8:"H", 9:"H", 10:"H", 11:"H"},
    5:  {2:"H", 3:"H", 4:"H", 5:"H", 6:"H", 7:"H", 8:"H", 9:"H", 10:"H", 11:"H"},
}

# Pairs by point value vs dealer up value
PAIRS = {
    11: {2:"P", 3:"P", 4:"P", 5:"P", 6:"P", 7:"P", 8:"P", 9:"P", 10:"P", 11:"P"},  # Always split aces
    10: {2:"S", 3:"S", 4:"S", 5:"S", 6:"S", 7:"S", 8:"S", 9:"S", 10:"S", 11:"S"},  # 10,10 never split
    9:  {2:"P", 3:"P", 4:"P", 5:"P", 6:"P", 7:"S", 8:"P", 9:"P", 10:"S", 11:"S"},
    8:  {2:"P", 3:"P", 4:"P", 5:"P", 6:"P", 7:"P", 8:"P", 9:"P", 10:"P", 11:"P"},  # Always split 8s
    7:  {2:"P", 3:"P", 4:"P", 5:"P", 6:"P", 7:"P", 8:"H", 9:"H", 10:"H", 11:"H"},
    6:  {2:"Ph", 3:"P", 4:"P", 5:"P", 6:"P", 7:"H", 8:"H", 9:"H", 10:"H", 11:"H"},
    5:  {2:"Dh", 3:"Dh", 4:"Dh", 5:"Dh", 6:"Dh", 7:"Dh", 8:"Dh", 9:"Dh", 10:"H", 11:"H"},  # Never split 5s
    4:  {2:"H", 3:"H", 4:"H", 5:"Ph", 6:"Ph", 7:"H", 8:"H", 9:"H", 10:"H", 11:"H"},
    3:  {2:"Ph", 3:"Ph", 4:"P", 5:"P", 6:"P", 7:"P", 8:"H", 9:"H", 10:"H", 11:"H"},
    2:  {2:"Ph", 3:"Ph", 4:"P", 5:"P", 6:"P", 7:"P", 8:"H", 9:"H", 10:"H", 11:"H"},
}


def total_key(total: int, dealer_up: int) -> str:
    return f"{total},{dealer_up}"


def pair_key(value: int, dealer_up: int) -> str:
    return f"{value},{value},{dealer_up}"


class StrategyTable:
    """Read-only mapping from a hand signature and dealer up value to an Action.

    Keys are either ``"{player_total},{dealer_up}"`` or, for a two-card pair,
    ``"{value},{value},{dealer_up}"``. The table is built once before any game
    starts and never mutated, so games share it without locking.
    """

    def __init__(self, entries: Mapping[str, Action]):
        self._entries = MappingProxyType(dict(entries))

    @classmethod
    def basic(cls) -> "StrategyTable":
        """Build the standard basic-strategy chart."""
        entries = {}
        for total, row in HARD_TOTALS.items():
            for dealer_up, code in row.items():
                entries[total_key(total, dealer_up)] = CHART_CODES[code]
        for value, row in PAIRS.items():
            for dealer_up, code in row.items():
                entries[pair_key(value, dealer_up)] = CHART_CODES[code]
        return cls(entries)

    @classmethod
    def from_json(cls, path) -> "StrategyTable":
        """Load a table from a JSON object of key -> chart code.

        Incomplete tables load with a warning; looking up a missing key
        during play is still fatal.
        """
        with open(path) as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ValueError(f"Strategy file {path} must contain a JSON object")

        entries = {}
        for key, code in raw.items():
            if code not in CHART_CODES:
                raise ValueError(f"Unknown action {code!r} for {key} in {path}")
            entries[key] = CHART_CODES[code]

        table = cls(entries)
        missing = table.missing_keys()
        if missing:
            logger.warning(f"Strategy table {path} is missing {len(missing)} entries, "
                           f"e.g. {', '.join(missing[:5])}")
        return table

    @property
    def entries(self) -> Mapping[str, Action]:
        return self._entries

    def lookup(self, key: str) -> Action:
        try:
            return self._entries[key]
        except KeyError:
            raise StrategyLookupError(key) from None

    def missing_keys(self) -> List[str]:
        """Every reachable key the table has no entry for."""
        missing = []
        for dealer_up in DEALER_UP_VALUES:
            for total in TOTAL_RANGE:
                key = total_key(total, dealer_up)
                if key not in self._entries:
                    missing.append(key)
            for value in PAIR_VALUES:
                key = pair_key(value, dealer_up)
                if key not in self._entries:
                    missing.append(key)
        return missing

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def print_tables(self):
        """Print formatted strategy tables"""
        print("\nLegend:")
        print("H   = Hit")
        print("S   = Stand")
        print("D   = Double")
        print("P   = Split")
        print(".   = No entry")

        header = "       " + "  ".join(_up_label(up) for up in DEALER_UP_VALUES)
        print("\nHard Totals:")
        print(header)
        for total in reversed(TOTAL_RANGE):
            row = f"{total:5d}"
            for dealer_up in DEALER_UP_VALUES:
                row += f"  {self._code(total_key(total, dealer_up))}"
            print(row)

        print("\nPairs:")
        print(header)
        for value in reversed(PAIR_VALUES):
            label = _up_label(value)
            row = f"{label + ',' + label:>5}"
            for dealer_up in DEALER_UP_VALUES:
                row += f"  {self._code(pair_key(value, dealer_up))}"
            print(row)

    def _code(self, key: str) -> str:
        action = self._entries.get(key)
        return action.value if action else "."


def _up_label(value: int) -> str:
    if value == 11:
        return "A"
    if value == 10:
        return "T"
    return str(value)


if __name__ == "__main__":
    strategy = StrategyTable.basic()
    strategy.print_tables()

    print("\nExample decisions:")
    print(f"8,8 vs Dealer 9:   {strategy.lookup(pair_key(8, 9))}")      # Should be Split
    print(f"11 vs Dealer 6:    {strategy.lookup(total_key(11, 6))}")    # Should be Double
    print(f"16 vs Dealer T:    {strategy.lookup(total_key(16, 10))}")   # Should be Hit
    print(f"12 vs Dealer 4:    {strategy.lookup(total_key(12, 4))}")    # Should be Stand
