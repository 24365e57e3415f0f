__all__ = [
    # API
    "WriteApi",
    "WriteConfig",
    "MessageCollector",
    # Model
    "ActionDefinition",
    "ActionFragment",
    "Authorization",
    "NormalizedCall",
    "SignRequest",
    # Collaborators
    "AbiCodec",
    "RpcNetwork",
    "SchemaRegistry",
    # Signing
    "generate_key",
    "get_address",
    "local_signer",
    "recover_signer",
    "sign",
    # Errors
    "ArgumentError",
    "ConfigurationError",
    "NetworkError",
    "SigningError",
    "UnknownActionError",
    "ValidationError",
    "WriteApiError",
]

from .chain.codec import AbiCodec
from .chain.rpc import RpcNetwork
from .config import WriteConfig
from .errors import (
    ArgumentError,
    ConfigurationError,
    NetworkError,
    SigningError,
    UnknownActionError,
    ValidationError,
    WriteApiError,
)
from .sigil.keys import generate_key, get_address, local_signer, recover_signer, sign
from .spec.models import ActionDefinition, ActionFragment, Authorization, NormalizedCall, SignRequest
from .spec.schemas import SchemaRegistry
from .write.api import WriteApi
from .write.batch import MessageCollector
