from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..context import ProvisionCtx
from ..lib.certs import CertRequest, ensure_certificate
from ..state import record_decision

logger = logging.getLogger(__name__)


class CertificateStep:
    step_id = "60_certificate"
    title = "Setting up the TLS certificate"

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = ctx.cfg
        req = CertRequest(
            key_path=Path(cfg.tls_key_path),
            cert_path=Path(cfg.tls_cert_path),
            common_name=f"{ctx.hostname()}.local",
            subject_prefix=cfg.cert_subject_prefix,
            days=cfg.cert_days,
            key_bits=cfg.cert_key_bits,
            include_loopback_ip=cfg.cert_include_loopback_ip,
        )
        record_decision(state, "certificate_generated", ensure_certificate(req, ctx.certs))
        return state
