"""
dbscript – run directories of SQL scripts against MariaDB / MySQL.
"""
__version__ = "0.4.0"
