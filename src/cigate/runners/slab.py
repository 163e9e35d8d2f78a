"""Slab runner platform client.

Slab starts and stops self-hosted GitHub runners on cloud backends (``aws``,
``hyperstack``, ...) for a capability profile (``cpu-big``, ``single-h100``, ...).
Requests are JSON bodies signed with HMAC-SHA256 using the job secret, and
authenticated with the repository's action token.
"""

import hashlib
import hmac
import json
from typing import Any

import requests

from cigate.common.errors import ProvisioningError, TeardownError
from cigate.models import RunnerSpec
from cigate.runners.base import RunnerPlatform
from cigate_common.env import read_str
from cigate_logging import get_cli_logger

logger = get_cli_logger(__name__)

SIGNATURE_HEADER = "X-Hub-Signature-256"
REQUEST_TIMEOUT = 30
READY_STATES = frozenset({"ready", "running", "online"})
FAILED_STATES = frozenset({"failed", "error", "terminated"})


class SlabRunnerPlatform(RunnerPlatform):
    """Start and stop runners through a Slab server.

    Parameters
    ----------
    base_url : str
        Slab server URL
    token : str
        Action token sent as a bearer token
    job_secret : str
        Shared secret used to sign request bodies
    repository : str
        ``owner/name`` of the repository the runner registers with
    run_id : str
        Run identifier, recorded by Slab for bookkeeping
    """

    name = "slab"

    def __init__(
        self,
        base_url: str,
        token: str,
        job_secret: str,
        repository: str = "",
        run_id: str = "",
    ) -> None:
        if not base_url.startswith("https://"):
            msg = f"Slab URL must use https: {base_url}"
            raise ValueError(msg)
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.job_secret = job_secret
        self.repository = repository
        self.run_id = run_id

    @classmethod
    def from_env(cls, repository: str = "", run_id: str = "") -> "SlabRunnerPlatform":
        """Build a client from the ``SLAB_BASE_URL``, ``SLAB_ACTION_TOKEN`` and
        ``JOB_SECRET`` variables.

        Raises
        ------
        ProvisioningError
            If any of the variables is missing
        """
        values = {
            var: read_str(var)
            for var in ("SLAB_BASE_URL", "SLAB_ACTION_TOKEN", "JOB_SECRET")
        }
        missing = [var for var, value in values.items() if not value]
        if missing:
            msg = f"Missing Slab configuration: {', '.join(missing)}"
            raise ProvisioningError(msg)
        return cls(
            base_url=values["SLAB_BASE_URL"],
            token=values["SLAB_ACTION_TOKEN"],
            job_secret=values["JOB_SECRET"],
            repository=repository,
            run_id=run_id,
        )

    def sign(self, body: bytes) -> str:
        """Compute the request signature for ``body``."""
        digest = hmac.new(self.job_secret.encode(), body, hashlib.sha256).hexdigest()
        return f"sha256={digest}"

    def _headers(self, body: bytes = b"") -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            SIGNATURE_HEADER: self.sign(body),
        }

    def _post(self, path: str, payload: dict[str, Any]) -> requests.Response:
        body = json.dumps(payload, sort_keys=True).encode()
        return requests.post(
            f"{self.base_url}{path}",
            data=body,
            headers=self._headers(body),
            timeout=REQUEST_TIMEOUT,
        )

    def start(self, spec: RunnerSpec) -> str:
        payload = {
            "action": "start",
            "backend": spec.backend,
            "profile": spec.profile,
            "repository": self.repository,
            "run_id": self.run_id,
        }
        try:
            resp = self._post("/job", payload)
            resp.raise_for_status()
            label = resp.json()["label"]
        except requests.RequestException as e:
            msg = f"Slab start failed for {spec.backend}/{spec.profile}: {e}"
            raise ProvisioningError(msg) from e
        except (KeyError, ValueError) as e:
            msg = f"Slab start returned an unexpected response: {e}"
            raise ProvisioningError(msg) from e

        logger.info(
            "Slab accepted runner %s (%s/%s)",
            label,
            spec.backend,
            spec.profile,
        )
        return label

    def is_ready(self, handle: str) -> bool:
        try:
            resp = requests.get(
                f"{self.base_url}/runner/{handle}",
                headers=self._headers(),
                timeout=REQUEST_TIMEOUT,
            )
            resp.raise_for_status()
            status = str(resp.json().get("status", "")).lower()
        except requests.RequestException as e:
            # Transient; the lifecycle manager keeps polling until its deadline
            logger.debug("Readiness check for %s failed: %s", handle, e)
            return False
        except ValueError as e:
            logger.debug("Readiness response for %s was not JSON: %s", handle, e)
            return False

        if status in FAILED_STATES:
            msg = f"Runner {handle} entered state '{status}'"
            raise ProvisioningError(msg)
        return status in READY_STATES

    def stop(self, handle: str) -> None:
        payload = {
            "action": "stop",
            "label": handle,
            "repository": self.repository,
            "run_id": self.run_id,
        }
        try:
            resp = self._post("/job", payload)
            if resp.status_code == requests.codes.not_found:
                logger.info("Runner %s already released", handle)
                return
            resp.raise_for_status()
        except requests.RequestException as e:
            msg = f"Slab stop failed for {handle}: {e}"
            raise TeardownError(msg) from e
        logger.info("Slab released runner %s", handle)
