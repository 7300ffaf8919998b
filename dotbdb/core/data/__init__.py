"""
Static data — the package manager dispatch table.

    from dotbdb.core.data.managers import MANAGERS, DistroId
"""
