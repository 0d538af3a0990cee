"""Exception types raised by the handshake simulator."""


class SimulationError(Exception):
    """Base class for all simulator errors."""


class FormatError(SimulationError, ValueError):
    """An envelope is not of the form <ivHex>:<cipherHex>."""


class DecryptionError(SimulationError, ValueError):
    """A well-formed envelope could not be decrypted under the given key."""


class ConfigurationError(SimulationError, ValueError):
    """Invalid configuration input."""
