"""
dbrestore – restore a dev/test MariaDB database from a mysqldump file.
"""
__version__ = "0.3.0"
