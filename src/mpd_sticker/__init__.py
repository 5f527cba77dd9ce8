"""Client for MPD stickers: name/value metadata attached to database objects."""

from mpd_sticker.config import Config as Config
from mpd_sticker.connection import Connection as Connection
from mpd_sticker.protocol import AckCode as AckCode
from mpd_sticker.protocol import MpdError as MpdError
from mpd_sticker.protocol import Pair as Pair
from mpd_sticker.protocol import ServerError as ServerError
from mpd_sticker.sticker import StickerClient as StickerClient
from mpd_sticker.sticker import StickerMatch as StickerMatch
from mpd_sticker.sticker import StickerPair as StickerPair
