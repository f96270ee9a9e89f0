"""
Commandeer configuration: command prefixes and aliases, globally and per guild.

Config keeps global Settings plus optional per-guild Settings. Guild settings are
created on first write; reads fall back to the global settings.

Persistence is the host application's concern: from_mapping() accepts a decoded
JSON document and to_mapping() produces one.

    >>> config = Config.from_mapping({"global": {"prefix": "?"}})
    >>> config.classic_prefix(None)
    '?'
"""
import logging
from types import MappingProxyType

from .models import snowflake
from .utils import *

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "!"


def _sanitize_prefix(prefix, /):
    if not isinstance(prefix, str):
        raise TypeError("settings 'prefix' must be a string")
    elif not (prefix := prefix.strip()):
        raise ValueError("settings 'prefix' cannot be empty")
    return prefix


def _sanitize_alias(name, command, /):
    if not isinstance(name, str) or not isinstance(command, str):
        raise TypeError("alias name and command must be strings")
    elif not name or any(character.isspace() for character in name):
        raise ValueError("alias name must be a non-empty word")
    elif not (command := command.strip()):
        raise ValueError("alias command cannot be empty")
    return name, command


class Settings(metaclass=IntrospectableType):
    """
    Prefix and aliases of one scope (global or a guild).

    - prefix: text that marks a message as a command (default "!").
    - aliases: alias name → command text substituted for it.
    """
    __introspectable__ = ("prefix", "aliases")

    def __init__(self, prefix=DEFAULT_PREFIX, aliases=()):
        self._prefix = _sanitize_prefix(prefix)
        self._aliases = {}
        for name, command in dict(aliases).items():
            self.add_alias(name, command)

    def set_prefix(self, prefix):
        """Replace the prefix, returning the previous one."""
        previous, self._prefix = self._prefix, _sanitize_prefix(prefix)
        return previous

    def add_alias(self, name, command):
        """Add (or replace) an alias, returning the replaced command text or None."""
        name, command = _sanitize_alias(name, command)
        previous = self._aliases.get(name)
        self._aliases[name] = command
        return previous

    def remove_alias(self, name):
        return self._aliases.pop(name, None)

    @classmethod
    def from_mapping(cls, mapping):
        return cls(mapping.get("prefix", DEFAULT_PREFIX), mapping.get("aliases", {}))

    def to_mapping(self):
        return {"prefix": self._prefix, "aliases": dict(self._aliases)}


class Config(metaclass=IntrospectableType):
    """
    Global settings plus per-guild overrides.
    """
    __introspectable__ = ("settings", "guilds")

    def __init__(self, settings=None, guilds=()):
        self._settings = settings if settings is not None else Settings()
        self._guilds = {snowflake(guild_id): settings for guild_id, settings in dict(guilds).items()}

    def guild(self, guild_id):
        """Settings of a guild, or None when the guild has no overrides."""
        return None if guild_id is None else self._guilds.get(guild_id)

    def _guild_or_default(self, guild_id):
        if (settings := self._guilds.get(guild_id := snowflake(guild_id))) is None:
            logger.debug("creating settings for guild %d", guild_id)
            settings = self._guilds[guild_id] = Settings(self._settings.prefix)
        return settings

    def classic_prefix(self, guild_id=None):
        """Prefix of free-text commands in a guild (None: direct messages and defaults)."""
        return (self.guild(guild_id) or self._settings).prefix

    def aliases(self, guild_id=None):
        """Effective aliases: global ones, overridden by the guild's own."""
        aliases = dict(self._settings.aliases)
        if (settings := self.guild(guild_id)) is not None:
            aliases.update(settings.aliases)
        return MappingProxyType(aliases)

    def set_prefix(self, guild_id, prefix):
        """Set a guild's prefix (the global one when guild_id is None); returns the previous prefix."""
        if guild_id is None:
            return self._settings.set_prefix(prefix)
        return self._guild_or_default(guild_id).set_prefix(prefix)

    def add_alias(self, guild_id, name, command):
        if guild_id is None:
            return self._settings.add_alias(name, command)
        return self._guild_or_default(guild_id).add_alias(name, command)

    def remove_alias(self, guild_id, name):
        """Remove an alias, returning its command text, or None when it did not exist."""
        settings = self._settings if guild_id is None else self.guild(guild_id)
        return None if settings is None else settings.remove_alias(name)

    @classmethod
    def from_mapping(cls, mapping):
        """
        Build a configuration from a decoded document:
        {"global": {"prefix": ..., "aliases": {...}}, "guilds": {"<id>": {...}}}.
        """
        return cls(
            Settings.from_mapping(mapping.get("global", {})),
            {guild_id: Settings.from_mapping(settings) for guild_id, settings in mapping.get("guilds", {}).items()},
        )

    def to_mapping(self):
        return {
            "global": self._settings.to_mapping(),
            "guilds": {str(guild_id): settings.to_mapping() for guild_id, settings in self._guilds.items()},
        }


__all__ = (
    "DEFAULT_PREFIX",
    "Settings",
    "Config",
)
