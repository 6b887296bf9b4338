# Container layout: salt[16] || iv[16] || AES-256-CBC ciphertext (PKCS#7)
SALT_SIZE = 16
IV_SIZE = 16
KEY_SIZE = 32  # AES-256
BLOCK_SIZE = 16
HEADER_SIZE = SALT_SIZE + IV_SIZE
MIN_CONTAINER_SIZE = HEADER_SIZE + 1

# PBKDF2-HMAC-SHA256; changing this breaks every archive already issued
KDF_ITERATIONS = 100_000

# File classification
ENCRYPTED_NAME_SUFFIX = ".zip.enc"
ENCRYPTED_EXT = ".enczip"
PLAIN_EXT = ".zip"

DEFAULT_ARCHIVE_SUFFIX = ENCRYPTED_NAME_SUFFIX
ARCHIVE_TIMESTAMP_FORMAT = "%Y%m%d_%H%M"

COPY_CHUNK_SIZE = 65_536

# Manifest
CORE_FILES = (
    "VMFUNC.C",
    "iout.cfg",
    "Simulator.ini",
    "Trace.ini",
    "statecolors.ini",
    "BICS.DAT",
    "ED16.DAT",
    "IOT.dat",
    "MMI.DAT",
    "SADAT.DAT",
    "XP.DAT",
    "kop.def",
    "port.info",
    "SRM.LOG",
    "XLOG.LOG",
    "XPARCHANGEO.LOG",
    "report01.html",
    "configNotes.txt",
    "default_Flop_Files.zip",
)

SITEVIEW_COUNT = 10
SITEVIEW_EXTENSIONS = (".ini", ".png")

DEFAULT_FLOP_FILES = "default_Flop_Files.zip"

# Site workspace
SITE_TEMP_DIRNAME = "Temp"
WORKSPACE_ENV = "SITECRATE_HOME"
WORKSPACE_DIRNAME = ".sitecrate"
