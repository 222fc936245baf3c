from __future__ import annotations


class DomainError(Exception):
    """Base para erros de dominio."""


class ConfigError(DomainError):
    """Configuracao ausente ou invalida."""


class RpcError(DomainError):
    """Falha em chamada RPC ao no da chain."""


class ProviderError(RpcError):
    """Nao foi possivel montar o provider da chain."""


class DatabaseError(DomainError):
    """Falha de leitura ou escrita no store."""


class SerializationError(DomainError):
    """Payload persistido nao pode ser (de)serializado."""


class DexError(DomainError):
    """Erro semantico de uma DEX ou de uma distribuicao."""


class IncompleteTickDataError(DexError):
    """Leitura parcial de ticks; distribuicao rejeitada."""


class DistributionNotFoundError(DexError):
    """Nao existe distribuicao para o par solicitado."""


class ApiError(DomainError):
    """Erro generico da camada HTTP."""


class InvalidRequestError(ApiError):
    """Parametros da requisicao invalidos."""


class InvalidAddressError(DomainError):
    """Endereco EVM mal formado."""


class UnknownDexError(DomainError):
    """DEX nao suportada."""


class TokenNotFoundError(DomainError):
    """Token nao encontrado no store."""


class PoolNotFoundError(DomainError):
    """Pool solicitada nao existe."""
