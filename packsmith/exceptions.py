"""Custom exceptions for resource pack optimization"""


class PackError(Exception):
    """Base exception for resource pack errors"""
    pass


class InvalidIdentifierError(PackError, ValueError):
    """Identifier text is not lower-case, contains spaces or is empty"""
    pass


class AssetNotFoundError(PackError):
    """Model or texture file missing from the pack"""
    pass


class MalformedAssetError(PackError):
    """Bad JSON, undecodable image or invalid model structure"""
    pass


class PackingError(PackError):
    """Texture areas do not fit into the largest allowed atlas"""
    pass


class AssetWriteError(PackError):
    """Model or texture could not be persisted"""
    pass
