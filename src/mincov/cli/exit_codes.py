# mirror <sysexits.h>
EXIT_OK = 0  # Normal success
EXIT_GENERIC = 1  # Generic failure (fallback)
EXIT_DATAERR = 65  # Input data was invalid (e.g., corrupt exec file)
EXIT_NOINPUT = 66  # Input file not found (exec file or class path missing)
EXIT_UNAVAILABLE = 69  # Coverage engine unavailable (no java or JaCoCo CLI)
EXIT_IOERR = 74  # Report could not be written
