from typing import Any, Dict, Optional

class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None,
        message_th: Optional[str] = None,
    ):
        self.message = message
        self.message_th = message_th
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)

    def localized(self, lang: str) -> str:
        if lang == "th" and self.message_th:
            return self.message_th
        return self.message

class ValidationError(AppException):
    def __init__(self, message: str, message_th: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            message_th=message_th,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details
        )

class QuotaNotFoundError(AppException):
    def __init__(self, leave_type_id: Optional[str] = None):
        super().__init__(
            message="Leave quota for this type not found.",
            message_th="ไม่พบโควต้าการลาสำหรับประเภทนี้",
            status_code=400,
            error_code="QUOTA_NOT_FOUND",
            details={"leave_type_id": leave_type_id}
        )

class QuotaExceededError(AppException):
    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="You have exceeded your leave quota for this type.",
            message_th="คุณใช้สิทธิ์การลาประเภทนี้เกินโควต้าแล้ว",
            status_code=400,
            error_code="QUOTA_EXCEEDED",
            details=details
        )

class BackdatedLeaveError(AppException):
    def __init__(self):
        super().__init__(
            message="Backdated leave is not allowed. Please change settings or select a new date",
            message_th="ไม่อนุญาตให้ส่งคำขอลาย้อนหลัง กรุณาเปลี่ยนการตั้งค่าหรือเลือกวันที่ใหม่",
            status_code=400,
            error_code="BACKDATED_NOT_ALLOWED"
        )

class NotFoundError(AppException):
    def __init__(self, entity: str, entity_id: Optional[str] = None, message_th: Optional[str] = None):
        super().__init__(
            message=f"{entity} not found",
            message_th=message_th or f"ไม่พบข้อมูล {entity}",
            status_code=404,
            error_code="NOT_FOUND",
            details={"entity": entity, "id": entity_id}
        )

class AuthenticationError(AppException):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            message_th="ไม่สามารถยืนยันตัวตนได้",
            status_code=401,
            error_code="AUTH_FAILED"
        )

class AccessDeniedError(AppException):
    """Custom permission error. Named AccessDeniedError to avoid shadowing Python's built-in PermissionError."""
    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(
            message=message,
            message_th="ไม่มีสิทธิ์เข้าถึง",
            status_code=403,
            error_code="PERMISSION_DENIED"
        )
