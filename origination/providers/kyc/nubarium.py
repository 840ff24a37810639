"""Nubarium KYC provider (RENAPO, SAT, INE, biometrics, blocklists)."""

import os
import time
from typing import Any

import httpx

from origination.config.models.providers import NubariumConfig
from origination.observability.logging import get_logger
from origination.observability.metrics import KYC_PROVIDER_LATENCY
from origination.providers.kyc.base import (
    BlocklistResult,
    CurpValidation,
    FaceMatchResult,
    IneOcrData,
    IneValidation,
    KycAuthenticationError,
    KycProvider,
    KycProviderError,
    KycUnavailableError,
    LivenessResult,
    RfcValidation,
    is_valid_curp_format,
    is_valid_rfc_format,
)

logger = get_logger(__name__)

# Tokens are issued for 60 minutes; refresh a little early
TOKEN_TTL_SECONDS = 3500

# INE subtypes that carry CIC plus citizen identifier on the back
_CIC_SUBTYPES = frozenset({"E", "F", "G", "H"})


def credentials_from_env() -> tuple[str | None, str | None]:
    """API user and password from ORIGINATION_NUBARIUM_USERNAME / _PASSWORD."""
    return (
        os.environ.get("ORIGINATION_NUBARIUM_USERNAME"),
        os.environ.get("ORIGINATION_NUBARIUM_PASSWORD"),
    )


class NubariumKycProvider(KycProvider):
    """KYC provider backed by the Nubarium APIs.

    Authenticates with basic credentials to obtain a JWT, caches it, and
    retries a call once with a fresh token when the API answers 401 or 403.
    """

    def __init__(
        self,
        config: NubariumConfig | None = None,
        username: str | None = None,
        password: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize the Nubarium provider.

        Args:
            config: Endpoints and timeouts
            username: API user (defaults to ORIGINATION_NUBARIUM_USERNAME)
            password: API password (defaults to ORIGINATION_NUBARIUM_PASSWORD)
            client: HTTP client to use, mainly for tests
        """
        self._config = config or NubariumConfig()
        env_username, env_password = credentials_from_env()
        self._username = username or env_username
        self._password = password or env_password
        if not self._username or not self._password:
            raise ValueError(
                "ORIGINATION_NUBARIUM_USERNAME and ORIGINATION_NUBARIUM_PASSWORD must be set"
            )

        self._client = client or httpx.AsyncClient(timeout=self._config.timeout)
        self._token: str | None = None
        self._token_expires_at = 0.0

    @property
    def provider_name(self) -> str:
        return "nubarium"

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    async def validate_curp(self, curp: str) -> CurpValidation:
        curp = curp.strip().upper()
        if not is_valid_curp_format(curp):
            return CurpValidation(valid=False, curp=curp, error="Formato de CURP inválido")

        response = await self._post(
            "curp", self._config.curp_url, "/renapo/v3/valida_curp", {"curp": curp}
        )
        data = self._json(response, "curp")

        if data.get("estatus") != "OK":
            return CurpValidation(
                valid=False,
                curp=curp,
                error=data.get("mensaje") or "CURP no válido",
                error_code=_as_str(data.get("codigoMensaje")),
                validation_code=_as_str(data.get("codigoValidacion")),
                raw=data,
            )

        return CurpValidation(
            valid=True,
            curp=data.get("curp") or curp,
            first_name=data.get("nombre"),
            last_name_1=data.get("apellidoPaterno"),
            last_name_2=data.get("apellidoMaterno"),
            birth_date=data.get("fechaNacimiento"),
            gender=data.get("sexo"),
            birth_state=data.get("estadoNacimiento"),
            curp_status=data.get("estatusCurp") or "RCN",
            validation_code=_as_str(data.get("codigoValidacion")),
            raw=data,
        )

    async def validate_rfc(self, rfc: str) -> RfcValidation:
        rfc = rfc.strip().upper()
        if not is_valid_rfc_format(rfc):
            return RfcValidation(valid=False, rfc=rfc, error="Formato de RFC inválido")

        response = await self._post("rfc", self._config.sat_url, "/sat/valida_rfc", {"rfc": rfc})
        data = self._json(response, "rfc")

        if data.get("estatus") != "OK":
            return RfcValidation(
                valid=False,
                rfc=rfc,
                error=data.get("mensaje") or "RFC no válido",
                validation_code=_as_str(data.get("codigoValidacion")),
                raw=data,
            )

        return RfcValidation(
            valid=True,
            rfc=rfc,
            person_type=data.get("tipoPersona") or ("M" if len(rfc) == 12 else "F"),
            message=data.get("mensaje"),
            validation_code=_as_str(data.get("codigoValidacion")),
            raw=data,
        )

    async def validate_ine(
        self,
        front_image: str,
        back_image: str | None = None,
        validate_list: bool = True,
    ) -> IneValidation:
        payload: dict[str, Any] = {"id": front_image}
        if back_image:
            payload["idReverso"] = back_image

        response = await self._post(
            "ine_ocr",
            self._config.ocr_url,
            "/ocr/v1/obtener_datos_id",
            payload,
            timeout=self._config.biometrics_timeout,
        )
        data = self._json(response, "ine_ocr")
        if data.get("estatus") == "ERROR":
            raise KycProviderError(
                data.get("mensaje") or "Error al procesar imagen", provider=self.provider_name
            )

        ocr_data = IneOcrData(
            tipo=data.get("tipo"),
            subtipo=data.get("subTipo"),
            clave_elector=data.get("claveElector"),
            curp=data.get("curp"),
            nombres=data.get("nombres"),
            apellido_paterno=data.get("primerApellido"),
            apellido_materno=data.get("segundoApellido"),
            fecha_nacimiento=data.get("fechaNacimiento"),
            sexo=data.get("sexo"),
            ocr=data.get("ocr"),
            cic=data.get("cic"),
            identificador_ciudadano=data.get("identificadorCiudadano"),
            numero_emision=data.get("numeroEmision"),
            emision=data.get("emision"),
            vigencia=data.get("vigencia"),
        )
        result = IneValidation(
            ocr_data=ocr_data, validation_code=_as_str(data.get("codigoValidacion"))
        )
        if not validate_list:
            return result

        list_payload = self._nominal_list_payload(ocr_data)
        if not list_payload:
            logger.warning("ine_list_payload_incomplete", subtype=ocr_data.subtipo)
            result.list_checked = True
            result.list_valid = False
            result.list_message = "No se pudieron obtener los datos necesarios del INE"
            return result

        response = await self._post(
            "ine_list", self._config.ine_url, "/ine/v2/valida_ine", list_payload
        )
        list_data = self._json(response, "ine_list")
        result.list_checked = True
        result.list_valid = list_data.get("estatus") == "OK"
        result.list_message = list_data.get("mensaje")
        result.list_validation_code = _as_str(list_data.get("codigoValidacion"))
        return result

    # ------------------------------------------------------------------
    # Biometrics
    # ------------------------------------------------------------------

    async def face_match(
        self, selfie_image: str, ine_image: str, threshold: int = 80
    ) -> FaceMatchResult:
        if not selfie_image or not ine_image:
            raise KycProviderError(
                "Se requieren ambas imágenes (selfie e INE)", provider=self.provider_name
            )

        response = await self._post(
            "face_match",
            self._config.global_url,
            "/global/biometrics/v1/compare-id-face",
            {"id": ine_image, "face": selfie_image, "media": "image", "threshold": str(threshold)},
            timeout=self._config.biometrics_timeout,
        )
        data = self._json(response, "face_match")

        status = data.get("status") or data.get("estatus")
        message_code = data.get("messageCode", data.get("codigoMensaje", -1))
        if status == "ERROR":
            raise KycProviderError(
                data.get("message") or data.get("mensaje") or "Error en comparación facial",
                provider=self.provider_name,
            )

        score = float(data.get("similarity") or data.get("similitud") or 0)
        match = message_code == 0 and score >= threshold
        return FaceMatchResult(
            match=match,
            score=score,
            threshold=threshold,
            message_code=message_code,
            validation_code=_as_str(data.get("validationCode") or data.get("codigoValidacion")),
            message="Los rostros coinciden"
            if match
            else data.get("message") or data.get("mensaje") or "Los rostros no coinciden",
        )

    async def liveness(self, face_image: str) -> LivenessResult:
        if not face_image:
            raise KycProviderError("Se requiere imagen del rostro", provider=self.provider_name)

        response = await self._post(
            "liveness",
            self._config.global_url,
            "/global/biometrics/v1/liveness-face",
            {"face": face_image},
            timeout=self._config.biometrics_timeout,
        )
        data = self._json(response, "liveness")
        message_code = data.get("messageCode", -1)
        if data.get("status") == "ERROR":
            raise KycProviderError(
                data.get("message") or "Error en detección de vida", provider=self.provider_name
            )

        score = float(data.get("liveness") or data.get("score") or 0)
        if 0 < score <= 1:
            score *= 100
        passed = message_code == 0
        return LivenessResult(
            passed=passed,
            score=score,
            message_code=message_code,
            validation_code=_as_str(data.get("validationCode")),
            message="Prueba de vida exitosa"
            if passed
            else data.get("message") or "Prueba de vida fallida",
        )

    # ------------------------------------------------------------------
    # Compliance
    # ------------------------------------------------------------------

    async def check_ofac(self, name: str, similarity: int = 80) -> BlocklistResult:
        response = await self._post(
            "ofac",
            self._config.global_url,
            "/blocklist/v1/query",
            {"name": name.upper(), "similarity": similarity},
            allow_not_found=True,
        )
        if response.status_code == 404:
            logger.warning("ofac_service_unavailable")
            return BlocklistResult(found=False, warning="Servicio de listas OFAC no disponible")

        data = self._json(response, "ofac")
        records = data.get("records") or []
        return BlocklistResult(
            found=bool(records),
            matches=records,
            count=len(records),
            validation_code=_as_str(data.get("validationCode")),
        )

    async def check_pld(
        self, full_name: str, curp: str | None = None, similarity: int = 80
    ) -> BlocklistResult:
        payload: dict[str, Any] = {"nombreCompleto": full_name.upper(), "similitud": similarity}
        if curp:
            payload["curp"] = curp.upper()

        response = await self._post(
            "pld",
            self._config.global_url,
            "/blacklists/v1/consulta",
            payload,
            allow_not_found=True,
        )
        if response.status_code == 404:
            logger.warning("pld_service_unavailable")
            return BlocklistResult(
                found=False, warning="Servicio de listas negras PLD no disponible"
            )

        data = self._json(response, "pld")
        results = data.get("resultados") or []
        return BlocklistResult(
            found=bool(results),
            matches=results,
            count=data.get("conteoResultados", len(results)),
            validation_code=_as_str(data.get("codigoValidacion")),
        )

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    async def _get_token(self, *, force: bool = False) -> str:
        if not force and self._token and time.monotonic() < self._token_expires_at:
            return self._token

        url = f"{self._config.auth_url}/global/account/v1/generate-jwt"
        try:
            response = await self._client.post(
                url,
                auth=(self._username, self._password),
                json={"expire": 60},
                timeout=self._config.timeout,
            )
        except httpx.HTTPError as e:
            raise KycUnavailableError(
                f"Nubarium authentication request failed: {e}", provider=self.provider_name
            ) from e

        if response.status_code != 200:
            logger.error("nubarium_token_error", status_code=response.status_code)
            raise KycAuthenticationError(
                "Nubarium rejected the credentials",
                provider=self.provider_name,
                status_code=response.status_code,
            )

        data = response.json()
        token = data.get("bearer_token") or data.get("token") or data.get("access_token")
        if not token:
            raise KycAuthenticationError(
                "Nubarium token response did not include a token", provider=self.provider_name
            )

        self._token = token
        self._token_expires_at = time.monotonic() + TOKEN_TTL_SECONDS
        logger.info("nubarium_token_generated")
        return token

    async def _post(
        self,
        check: str,
        base_url: str,
        endpoint: str,
        payload: dict[str, Any],
        *,
        timeout: float | None = None,
        allow_not_found: bool = False,
    ) -> httpx.Response:
        """POST with bearer auth, refreshing the token once on 401/403."""
        url = f"{base_url}{endpoint}"
        logger.debug("nubarium_request", check=check, endpoint=endpoint)

        started = time.perf_counter()
        try:
            response = await self._send(url, payload, timeout)
            if response.status_code in (401, 403):
                logger.info("nubarium_token_refresh", check=check, status_code=response.status_code)
                await self._get_token(force=True)
                response = await self._send(url, payload, timeout)
        except httpx.TimeoutException as e:
            raise KycUnavailableError(
                f"Nubarium {check} request timed out", provider=self.provider_name
            ) from e
        except httpx.HTTPError as e:
            raise KycUnavailableError(
                f"Nubarium {check} request failed: {e}", provider=self.provider_name
            ) from e
        finally:
            KYC_PROVIDER_LATENCY.labels(provider=self.provider_name, check=check).observe(
                time.perf_counter() - started
            )

        if response.is_success or (allow_not_found and response.status_code == 404):
            return response

        logger.error(
            "nubarium_request_error",
            check=check,
            endpoint=endpoint,
            status_code=response.status_code,
        )
        if response.status_code in (401, 403):
            raise KycAuthenticationError(
                "Nubarium rejected the request",
                provider=self.provider_name,
                status_code=response.status_code,
            )
        if response.status_code >= 500:
            raise KycUnavailableError(
                f"Nubarium {check} service error",
                provider=self.provider_name,
                status_code=response.status_code,
            )
        raise KycProviderError(
            f"Nubarium {check} request failed ({response.status_code})",
            provider=self.provider_name,
            status_code=response.status_code,
        )

    async def _send(
        self, url: str, payload: dict[str, Any], timeout: float | None
    ) -> httpx.Response:
        token = await self._get_token()
        return await self._client.post(
            url,
            json=payload,
            headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            timeout=timeout or self._config.timeout,
        )

    def _json(self, response: httpx.Response, check: str) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as e:
            raise KycProviderError(
                f"Nubarium {check} returned invalid JSON", provider=self.provider_name
            ) from e
        if not isinstance(data, dict):
            raise KycProviderError(
                f"Nubarium {check} returned an unexpected payload", provider=self.provider_name
            )
        return data

    @staticmethod
    def _nominal_list_payload(ocr: IneOcrData) -> dict[str, Any]:
        """Identifiers the nominal-list check needs for this credential model."""
        subtype = (ocr.subtipo or "").upper()
        by_citizen_id = (
            {"cic": ocr.cic, "identificadorCiudadano": ocr.identificador_ciudadano}
            if ocr.cic and ocr.identificador_ciudadano
            else {}
        )
        by_cic = {"cic": ocr.cic, **({"ocr": ocr.ocr} if ocr.ocr else {})} if ocr.cic else {}
        by_clave = (
            {
                "claveElector": ocr.clave_elector,
                **({"numeroEmision": ocr.numero_emision} if ocr.numero_emision else {}),
                **({"ocr": ocr.ocr} if ocr.ocr else {}),
            }
            if ocr.clave_elector
            else {}
        )

        if subtype in _CIC_SUBTYPES:
            return by_citizen_id
        if subtype == "D":
            return by_cic
        if subtype == "C":
            return by_clave
        return by_citizen_id or by_cic or by_clave


def _as_str(value: Any) -> str | None:
    return None if value is None else str(value)
