DEFAULT_DELIMITER = ";"

# mysqldump header lines, conditional comments and client-side pragmas
DEFAULT_COMMENT_PREFIXES = ("#", "-- ", "DELIMITER", "/*!")

DEFAULT_CHUNK_SIZE = 32 * 1024
DEFAULT_ENCODING = "utf-8"

DEFAULT_DUMP_NAME = "database.sql.gz"
DEFAULT_ASSETS_DIR = "assets"
ALLOWED_EXTENSIONS = (".sql", ".gz")
COMPRESSED_EXTENSION = ".gz"

UTF8_BOM = "\ufeff"

SAFE_STAGES = ("dev", "test")
