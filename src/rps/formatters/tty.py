"""Terminal device name resolution for the TTY column.

Maps a packed Linux device number (as found in /proc/<pid>/stat tty_nr)
to the conventional terminal name ps prints, e.g. ``pts/3`` or ``ttyS0``.

The major number selects a naming rule from TTY_MAJORS. Each rule is one
of a small set of variants:

- PrefixRule: fixed prefix plus decimal minor (``ttyUSB0``)
- SplitPrefixRule: two prefixes either side of a minor boundary (``tty1``/``ttyS0``)
- EncodedRule: prefix plus two symbols taken from the minor's nibbles (``ttyp0``)
- PtsRule: a run of majors sharing one minor space (``pts/257``)
- LookupRule: literal names indexed by minor

A rule returns None when the minor has no name, and resolve_tty() turns
that (or an unknown major) into ``?``.
"""

from __future__ import annotations

from dataclasses import dataclass

NO_TTY = "?"


def split_device_number(tty_nr: int) -> tuple[int, int]:
    """Unpack a device number into (major, minor).

    Uses the kernel's new_encode_dev layout: bits 8-19 hold the major,
    bits 0-7 and 20-31 hold the minor.
    """
    major = (tty_nr >> 8) & 0xFFF
    minor = (tty_nr & 0xFF) | ((tty_nr & 0xFFF00000) >> 12)
    return major, minor


@dataclass(frozen=True, slots=True)
class PrefixRule:
    """Prefix followed by the decimal minor, optionally shifted."""

    prefix: str
    offset: int = 0

    def name(self, major: int, minor: int) -> str | None:
        return f"{self.prefix}{minor + self.offset}"


@dataclass(frozen=True, slots=True)
class SplitPrefixRule:
    """Virtual consoles below the boundary, serial ports from it."""

    low_prefix: str
    high_prefix: str
    boundary: int

    def name(self, major: int, minor: int) -> str | None:
        if minor < self.boundary:
            return f"{self.low_prefix}{minor}"
        return f"{self.high_prefix}{minor - self.boundary}"


@dataclass(frozen=True, slots=True)
class EncodedRule:
    """Legacy BSD pty naming: high nibble and low nibble as symbols."""

    prefix: str
    high_symbols: str
    low_symbols: str

    def name(self, major: int, minor: int) -> str | None:
        if minor > 255:
            return None
        return f"{self.prefix}{self.high_symbols[minor >> 4]}{self.low_symbols[minor & 0x0F]}"


@dataclass(frozen=True, slots=True)
class PtsRule:
    """Unix98 ptys; each major past base adds 256 to the pts number."""

    prefix: str
    base_major: int

    def name(self, major: int, minor: int) -> str | None:
        return f"{self.prefix}{minor + (major - self.base_major) * 256}"


@dataclass(frozen=True, slots=True)
class LookupRule:
    """Literal names indexed directly by minor."""

    prefix: str
    names: tuple[str, ...]

    def name(self, major: int, minor: int) -> str | None:
        if minor < len(self.names):
            return f"{self.prefix}{self.names[minor]}"
        return None


TtyRule = PrefixRule | SplitPrefixRule | EncodedRule | PtsRule | LookupRule


# Major 204 is shared by many low-density serial drivers; the minor indexes
# this list directly. Names are not unique (SC0-SC3 appear twice).
LOW_DENSITY_NAMES: tuple[str, ...] = (
    "LU0", "LU1", "LU2", "LU3",
    "FB0",
    "SA0", "SA1", "SA2",
    "SC0", "SC1", "SC2", "SC3",
    "FW0", "FW1", "FW2", "FW3",
    "AM0", "AM1", "AM2", "AM3", "AM4", "AM5", "AM6", "AM7",
    "AM8", "AM9", "AM10", "AM11", "AM12", "AM13", "AM14", "AM15",
    "DB0", "DB1", "DB2", "DB3", "DB4", "DB5", "DB6", "DB7",
    "SG0",
    "SMX0", "SMX1", "SMX2",
    "MM0", "MM1",
    "CPM0", "CPM1", "CPM2", "CPM3",
    "IOC0", "IOC1", "IOC2", "IOC3", "IOC4", "IOC5", "IOC6", "IOC7",
    "IOC8", "IOC9", "IOC10", "IOC11", "IOC12", "IOC13", "IOC14", "IOC15",
    "IOC16", "IOC17", "IOC18", "IOC19", "IOC20", "IOC21", "IOC22", "IOC23",
    "IOC24", "IOC25", "IOC26", "IOC27", "IOC28", "IOC29", "IOC30", "IOC31",
    "VR0", "VR1",
    "IOC84", "IOC85", "IOC86", "IOC87", "IOC88", "IOC89", "IOC90", "IOC91",
    "IOC92", "IOC93", "IOC94", "IOC95", "IOC96", "IOC97", "IOC98", "IOC99",
    "IOC100", "IOC101", "IOC102", "IOC103", "IOC104", "IOC105", "IOC106", "IOC107",
    "IOC108", "IOC109", "IOC110", "IOC111", "IOC112", "IOC113", "IOC114", "IOC115",
    "SIOC0", "SIOC1", "SIOC2", "SIOC3", "SIOC4", "SIOC5", "SIOC6", "SIOC7",
    "SIOC8", "SIOC9", "SIOC10", "SIOC11", "SIOC12", "SIOC13", "SIOC14", "SIOC15",
    "SIOC16", "SIOC17", "SIOC18", "SIOC19", "SIOC20", "SIOC21", "SIOC22", "SIOC23",
    "SIOC24", "SIOC25", "SIOC26", "SIOC27", "SIOC28", "SIOC29", "SIOC30", "SIOC31",
    "PSC0", "PSC1", "PSC2", "PSC3", "PSC4", "PSC5",
    "AT0", "AT1", "AT2", "AT3", "AT4", "AT5", "AT6", "AT7",
    "AT8", "AT9", "AT10", "AT11", "AT12", "AT13", "AT14", "AT15",
    "NX0", "NX1", "NX2", "NX3", "NX4", "NX5", "NX6", "NX7",
    "NX8", "NX9", "NX10", "NX11", "NX12", "NX13", "NX14", "NX15",
    "J0",  # minor 186
    "UL0", "UL1", "UL2", "UL3",
    "xvc0",
    "PZ0", "PZ1", "PZ2", "PZ3",
    "TX0", "TX1", "TX2", "TX3", "TX4", "TX5", "TX6", "TX7",
    "SC0", "SC1", "SC2", "SC3",
    "MAX0", "MAX1", "MAX2", "MAX3",
)  # fmt: skip

_PTS = PtsRule("pts/", base_major=136)

TTY_MAJORS: dict[int, TtyRule] = {
    3: EncodedRule("tty", "pqrstuvwxyzabcde", "0123456789abcdef"),
    4: SplitPrefixRule("tty", "ttyS", boundary=64),
    11: PrefixRule("ttyB"),
    17: PrefixRule("ttyH"),
    19: PrefixRule("ttyC"),
    22: PrefixRule("ttyD"),
    23: PrefixRule("ttyD"),
    24: PrefixRule("ttyE"),
    32: PrefixRule("ttyX"),
    43: PrefixRule("ttyI"),
    46: PrefixRule("ttyR"),
    48: PrefixRule("ttyL"),
    57: PrefixRule("ttyP"),
    71: PrefixRule("ttyF"),
    75: PrefixRule("ttyW"),
    78: PrefixRule("ttyM"),
    105: PrefixRule("ttyV"),
    112: PrefixRule("ttyM"),
    **{major: _PTS for major in range(136, 144)},
    148: PrefixRule("ttyT"),
    154: PrefixRule("ttySR"),
    156: PrefixRule("ttySR", offset=256),
    164: PrefixRule("ttyCH"),
    166: PrefixRule("ttyACM"),
    172: PrefixRule("ttyMX"),
    174: PrefixRule("ttySI"),
    188: PrefixRule("ttyUSB"),
    204: LookupRule("tty", LOW_DENSITY_NAMES),
    208: PrefixRule("ttyU"),
    216: PrefixRule("ttyUB"),
    224: PrefixRule("ttyY"),
    227: PrefixRule("3270/tty"),
    229: PrefixRule("iseries/vtty"),
    256: PrefixRule("ttyEQ"),
}


def resolve_tty(tty_nr: int) -> str:
    """Return the terminal name for a packed device number.

    Args:
        tty_nr: Device number of the controlling terminal (0 if none)

    Returns:
        Terminal name such as ``pts/0``, or ``?`` when the process has no
        terminal or the device is not a known terminal driver.
    """
    if tty_nr == 0:
        return NO_TTY

    major, minor = split_device_number(tty_nr)
    rule = TTY_MAJORS.get(major)
    if rule is None:
        return NO_TTY

    return rule.name(major, minor) or NO_TTY
