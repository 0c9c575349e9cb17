from library_api.serialization.serializer import deserialize, parse, serialize
from library_api.serialization.views import ViewGroup

__all__ = ["ViewGroup", "deserialize", "parse", "serialize"]
