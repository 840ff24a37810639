"""Mock KYC provider for testing and development."""

from typing import Any

from origination.providers.kyc.base import (
    BlocklistResult,
    CurpValidation,
    FaceMatchResult,
    IneOcrData,
    IneValidation,
    KycProvider,
    KycProviderError,
    LivenessResult,
    RfcValidation,
    is_valid_curp_format,
    is_valid_rfc_format,
)


class MockKycProvider(KycProvider):
    """Mock KYC provider.

    Every well-formed CURP and RFC validates, faces match at a fixed
    score, and blocklists are empty. Tests override individual results
    through the constructor, or make every call fail with ``fail_with``.
    """

    def __init__(
        self,
        curp_result: CurpValidation | None = None,
        rfc_result: RfcValidation | None = None,
        ine_result: IneValidation | None = None,
        face_match_score: float = 95.0,
        liveness_score: float = 98.0,
        ofac_matches: list[dict[str, Any]] | None = None,
        pld_matches: list[dict[str, Any]] | None = None,
        fail_with: KycProviderError | None = None,
    ):
        self._curp_result = curp_result
        self._rfc_result = rfc_result
        self._ine_result = ine_result
        self._face_match_score = face_match_score
        self._liveness_score = liveness_score
        self._ofac_matches = ofac_matches or []
        self._pld_matches = pld_matches or []
        self._fail_with = fail_with
        self._call_history: list[dict[str, Any]] = []

    @property
    def provider_name(self) -> str:
        return "mock"

    @property
    def call_history(self) -> list[dict[str, Any]]:
        """Return history of calls for testing assertions."""
        return self._call_history

    def clear_history(self) -> None:
        self._call_history.clear()

    def _record(self, check: str, **kwargs: Any) -> None:
        self._call_history.append({"check": check, **kwargs})
        if self._fail_with is not None:
            raise self._fail_with

    async def validate_curp(self, curp: str) -> CurpValidation:
        self._record("curp", curp=curp)
        if self._curp_result is not None:
            return self._curp_result
        curp = curp.upper()
        if not is_valid_curp_format(curp):
            return CurpValidation(valid=False, curp=curp, error="Formato de CURP inválido")

        # Birth date is encoded as YYMMDD after the first four letters
        yy, mm, dd = curp[4:6], curp[6:8], curp[8:10]
        century = "20" if curp[16].isalpha() else "19"
        return CurpValidation(
            valid=True,
            curp=curp,
            first_name="JUAN",
            last_name_1="PEREZ",
            last_name_2="LOPEZ",
            birth_date=f"{dd}/{mm}/{century}{yy}",
            gender=curp[10],
            birth_state=curp[11:13],
            curp_status="RCN",
            validation_code="mock-curp",
        )

    async def validate_rfc(self, rfc: str) -> RfcValidation:
        self._record("rfc", rfc=rfc)
        if self._rfc_result is not None:
            return self._rfc_result
        rfc = rfc.upper()
        if not is_valid_rfc_format(rfc):
            return RfcValidation(valid=False, rfc=rfc, error="Formato de RFC inválido")
        return RfcValidation(
            valid=True,
            rfc=rfc,
            person_type="M" if len(rfc) == 12 else "F",
            validation_code="mock-rfc",
        )

    async def validate_ine(
        self,
        front_image: str,
        back_image: str | None = None,
        validate_list: bool = True,
    ) -> IneValidation:
        self._record("ine", has_back=back_image is not None, validate_list=validate_list)
        if self._ine_result is not None:
            return self._ine_result
        return IneValidation(
            ocr_data=IneOcrData(
                tipo="INE",
                subtipo="H",
                clave_elector="PRLPJN90051509H100",
                curp="PELJ900515HDFRPN09",
                nombres="JUAN",
                apellido_paterno="PEREZ",
                apellido_materno="LOPEZ",
                fecha_nacimiento="15/05/1990",
                sexo="H",
                cic="123456789",
                identificador_ciudadano="987654321",
            ),
            validation_code="mock-ine",
            list_checked=validate_list,
            list_valid=True if validate_list else None,
        )

    async def face_match(
        self, selfie_image: str, ine_image: str, threshold: int = 80
    ) -> FaceMatchResult:
        self._record("face_match", threshold=threshold)
        match = self._face_match_score >= threshold
        return FaceMatchResult(
            match=match,
            score=self._face_match_score,
            threshold=threshold,
            message_code=0,
            validation_code="mock-face",
            message="Los rostros coinciden" if match else "Los rostros no coinciden",
        )

    async def liveness(self, face_image: str) -> LivenessResult:
        self._record("liveness")
        return LivenessResult(
            passed=self._liveness_score >= 50,
            score=self._liveness_score,
            message_code=0,
            validation_code="mock-liveness",
        )

    async def check_ofac(self, name: str, similarity: int = 80) -> BlocklistResult:
        self._record("ofac", name=name, similarity=similarity)
        return BlocklistResult(
            found=bool(self._ofac_matches),
            matches=self._ofac_matches,
            count=len(self._ofac_matches),
        )

    async def check_pld(
        self, full_name: str, curp: str | None = None, similarity: int = 80
    ) -> BlocklistResult:
        self._record("pld", full_name=full_name, curp=curp, similarity=similarity)
        return BlocklistResult(
            found=bool(self._pld_matches),
            matches=self._pld_matches,
            count=len(self._pld_matches),
        )
