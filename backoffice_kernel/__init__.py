"""
Back-Office Kernel

The double-entry core of the hotel back office:
- Chart of accounts registry
- Journal entry validation and approval state machine
- Immutable GL postings materialized at posting time
- Linked, self-approving reversals
"""

__version__ = "0.1.0"
