"""Trust/key store adaptation and SSL context construction."""

from __future__ import annotations

import ssl
import tempfile
from dataclasses import dataclass
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives.serialization import Encoding, NoEncryption, PrivateFormat, pkcs12

from .config import JksConfig, PemKeyCertConfig, PemTrustCertConfig, PfxConfig, ReactivePoolConfig
from .models import (
    ConfigurationError,
    ConnectOptions,
    JksOptions,
    PemKeyCertOptions,
    PemTrustOptions,
    PfxOptions,
    SslMode,
)


@dataclass(frozen=True, slots=True)
class TlsOptions:
    """Store options applied to the connect options; ``None`` means not configured."""

    pem_trust: PemTrustOptions | None = None
    jks_trust: JksOptions | None = None
    pfx_trust: PfxOptions | None = None
    pem_key_cert: PemKeyCertOptions | None = None
    jks_key_cert: JksOptions | None = None
    pfx_key_cert: PfxOptions | None = None


def build_tls_options(reactive: ReactivePoolConfig) -> TlsOptions:
    """Translate every enabled store configuration; formats never clear each other."""

    return TlsOptions(
        pem_trust=_pem_trust(reactive.trust_certificate_pem),
        jks_trust=_jks(reactive.trust_certificate_jks),
        pfx_trust=_pfx(reactive.trust_certificate_pfx),
        pem_key_cert=_pem_key_cert(reactive.key_certificate_pem),
        jks_key_cert=_jks(reactive.key_certificate_jks),
        pfx_key_cert=_pfx(reactive.key_certificate_pfx),
    )


def _pem_trust(config: PemTrustCertConfig | None) -> PemTrustOptions | None:
    if config is None or not config.enabled:
        return None
    return PemTrustOptions(cert_paths=tuple(config.certs))


def _pem_key_cert(config: PemKeyCertConfig | None) -> PemKeyCertOptions | None:
    if config is None or not config.enabled:
        return None
    return PemKeyCertOptions(key_paths=tuple(config.keys), cert_paths=tuple(config.certs))


def _jks(config: JksConfig | None) -> JksOptions | None:
    if config is None or not config.enabled:
        return None
    return JksOptions(path=config.path, password=config.password)


def _pfx(config: PfxConfig | None) -> PfxOptions | None:
    if config is None or not config.enabled:
        return None
    return PfxOptions(path=config.path, password=config.password)


def build_ssl_context(options: ConnectOptions) -> ssl.SSLContext | None:
    """Build the client SSL context for ``options``; ``None`` when TLS is off."""

    if options.ssl_mode in (None, SslMode.DISABLED):
        return None
    if options.jks_trust is not None or options.jks_key_cert is not None:
        raise ConfigurationError(
            "JKS stores cannot be loaded by the default pool; use PEM/PFX or register a pool factory"
        )

    context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)
    if options.pem_trust is not None:
        for cert_path in options.pem_trust.cert_paths:
            context.load_verify_locations(cafile=cert_path)
    if options.pfx_trust is not None and options.pfx_trust.path:
        context.load_verify_locations(cadata=_pfx_trust_pem(options.pfx_trust))
    if options.pem_key_cert is not None:
        pem = options.pem_key_cert
        if len(pem.key_paths) != len(pem.cert_paths):
            raise ConfigurationError("PEM key and certificate lists must have the same length")
        for key_path, cert_path in zip(pem.key_paths, pem.cert_paths):
            context.load_cert_chain(certfile=cert_path, keyfile=key_path)
    if options.pfx_key_cert is not None and options.pfx_key_cert.path:
        _load_pfx_key_cert(context, options.pfx_key_cert)

    verify_identity = options.ssl_mode is SslMode.VERIFY_IDENTITY
    verify_ca = verify_identity or options.ssl_mode is SslMode.VERIFY_CA
    if options.trust_all or not verify_ca:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    else:
        context.check_hostname = verify_identity and bool(options.hostname_verification_algorithm)
        context.verify_mode = ssl.CERT_REQUIRED
    return context


def _read_pfx(options: PfxOptions):
    password = options.password.encode() if options.password else None
    data = Path(options.path).read_bytes()
    try:
        return pkcs12.load_key_and_certificates(data, password)
    except ValueError as exc:
        raise ConfigurationError(f"Unable to read PKCS#12 store '{options.path}': {exc}") from exc


def _pfx_trust_pem(options: PfxOptions) -> str:
    _, certificate, additional = _read_pfx(options)
    certificates: list[x509.Certificate] = list(additional or [])
    if certificate is not None:
        certificates.insert(0, certificate)
    if not certificates:
        raise ConfigurationError(f"PKCS#12 store '{options.path}' holds no certificates")
    return "".join(cert.public_bytes(Encoding.PEM).decode("ascii") for cert in certificates)


def _load_pfx_key_cert(context: ssl.SSLContext, options: PfxOptions) -> None:
    key, certificate, additional = _read_pfx(options)
    if key is None or certificate is None:
        raise ConfigurationError(f"PKCS#12 store '{options.path}' must hold a key and a certificate")
    chain = [certificate, *(additional or [])]
    with tempfile.TemporaryDirectory(prefix="mysqlpool-") as workdir:
        key_file = Path(workdir) / "client.key"
        cert_file = Path(workdir) / "client.pem"
        key_file.write_bytes(key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption()))
        cert_file.write_bytes(b"".join(cert.public_bytes(Encoding.PEM) for cert in chain))
        context.load_cert_chain(certfile=str(cert_file), keyfile=str(key_file))


__all__ = ["TlsOptions", "build_ssl_context", "build_tls_options"]
