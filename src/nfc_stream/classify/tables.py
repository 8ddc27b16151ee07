"""
Command Tables
==============

Per-technology command and response name tables.

All tables are read-only mappings built once at import. Keys are the
dispatch octet of the frame (first octet for NfcA/NfcB, second octet for
NfcF/NfcV, whose first octet is a length or flags byte).
"""

from types import MappingProxyType


# ISO/IEC 14443-3 anticollision plus MIFARE Ultralight / Classic commands
NFCA_COMMANDS = MappingProxyType({
    0x1A: "AUTH",        # MIFARE Ultralight C
    0x1B: "PWD_AUTH",    # MIFARE Ultralight EV1
    0x26: "REQA",
    0x30: "READ",
    0x39: "READ_CNT",
    0x3A: "FAST_READ",
    0x3C: "READ_SIG",
    0x3E: "TEARING",
    0x4B: "VCSL",
    0x50: "HLTA",
    0x52: "WUPA",
    0x60: "AUTH",        # MIFARE Classic key A
    0x61: "AUTH",        # MIFARE Classic key B
    0x93: "SEL1",
    0x95: "SEL2",
    0x97: "SEL3",
    0xA0: "COMP_WRITE",
    0xA2: "WRITE",
    0xA5: "INCR_CNT",
    0xE0: "RATS",
})

# Keyed by the command of the preceding poll frame
NFCA_RESPONSES = MappingProxyType({
    0x26: "ATQA",
    0x52: "ATQA",
})

NFCA_SELECT_COMMANDS = frozenset({0x93, 0x95, 0x97})

NFCA_HALT = 0x50
NFCA_RATS = 0xE0

NFCB_COMMANDS = MappingProxyType({
    0x05: "REQB",
    0x1D: "ATTRIB",
    0x50: "HLTB",
})

NFCB_RESPONSES = MappingProxyType({
    0x05: "ATQB",
})

NFCF_COMMANDS = MappingProxyType({
    0x00: "REQC",
})

NFCF_RESPONSES = MappingProxyType({
    0x00: "ATQC",
})

# ISO/IEC 15693
NFCV_COMMANDS = MappingProxyType({
    0x01: "Inventory",
    0x02: "StayQuiet",
    0x20: "ReadBlock",
    0x21: "WriteBlock",
    0x22: "LockBlock",
    0x23: "ReadBlocks",
    0x24: "WriteBlocks",
    0x25: "Select",
    0x26: "Reset",
    0x27: "WriteAFI",
    0x28: "LockAFI",
    0x29: "WriteDSFID",
    0x2A: "LockDSFID",
    0x2B: "SysInfo",
    0x2C: "GetSecurity",
})
