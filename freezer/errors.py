class FreezerError(Exception):
    """Base class for errors reported to the command line user."""


class ConfigError(FreezerError):
    pass


class WalletSourceError(FreezerError):
    pass


class BlueprintError(FreezerError):
    pass


class DatumError(FreezerError):
    pass


class AssetError(FreezerError):
    pass


class NothingToUnlock(FreezerError):
    pass


class ReferenceScriptError(FreezerError):
    pass
