from typing import Optional
from sqlalchemy.orm import Session
from siamleave.models.leave_request import LeaveRequest, LeaveStatus
from siamleave.models.leave_type import LeaveType
from siamleave.models.notification import Notification
from siamleave.services.duration import duration, format_duration

class NotificationService:
    @staticmethod
    def create_notification(
        db: Session,
        user_id: str,
        title: str,
        message: str,
        type: str = "info",
        link: Optional[str] = None
    ) -> Notification:
        """
        Internal utility for creating notifications.
        """
        notification = Notification(
            user_id=user_id,
            title=title,
            message=message,
            type=type,
            link=link
        )
        db.add(notification)
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    def notify_user(
        db: Session,
        user_id: str,
        title: str,
        message: str,
        type: str = "info",
        link: Optional[str] = None
    ):
        """
        Standardized notification trigger.
        """
        return NotificationService.create_notification(db, user_id, title, message, type, link)

    @staticmethod
    def notify_leave_status(
        db: Session,
        leave: LeaveRequest,
        leave_type: Optional[LeaveType],
        approver_name: str
    ) -> Notification:
        """
        Tell the requester their leave was approved or rejected (Thai, then English).
        """
        name_th = leave_type.name_th if leave_type else "Unknown Type"
        name_en = leave_type.name_en if leave_type else "Unknown Type"
        type_label = f"{name_th} ({name_en})" if name_en and name_en != name_th else name_th
        measured = duration(leave)
        dates = f"{leave.start_date.isoformat()} - {leave.end_date.isoformat()} ({format_duration(measured.days, measured.hours)})"

        if leave.status == LeaveStatus.APPROVED.value:
            title = "Leave Approved"
            message = (
                f"คำขอการลาของคุณได้รับการอนุมัติแล้ว\n"
                f"ประเภทการลา: {type_label}\nวันที่: {dates}\nผู้อนุมัติ: {approver_name}\n"
                f"---\n"
                f"Your leave request has been approved.\n"
                f"Leave Type: {type_label}\nDate: {dates}\nApproved by: {approver_name}"
            )
            kind = "success"
        else:
            title = "Leave Rejected"
            reason = f"\nเหตุผล: {leave.rejected_reason}" if leave.rejected_reason else ""
            reason_en = f"\nReason: {leave.rejected_reason}" if leave.rejected_reason else ""
            message = (
                f"คำขอการลาของคุณไม่ได้รับการอนุมัติ\n"
                f"ประเภทการลา: {type_label}\nวันที่: {dates}\nผู้อนุมัติ: {approver_name}{reason}\n"
                f"---\n"
                f"Your leave request has been rejected.\n"
                f"Leave Type: {type_label}\nDate: {dates}\nRejected by: {approver_name}{reason_en}"
            )
            kind = "error"

        return NotificationService.notify_user(
            db, leave.user_id, title, message, kind, link=f"/leave-requests/{leave.id}"
        )
