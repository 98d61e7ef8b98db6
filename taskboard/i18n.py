"""English and Arabic UI strings."""

from __future__ import annotations

import logging
from typing import Dict, Tuple

logger = logging.getLogger(__name__)

SUPPORTED_LOCALES: Tuple[str, ...] = ("en", "ar")
RTL_LOCALES = frozenset({"ar"})

TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "en": {
        "app.title": "Taskboard",
        "nav.dashboard": "Dashboard",
        "nav.employees": "Employees",
        "nav.tasks": "Tasks",
        "nav.files": "Files",
        "nav.sign_in": "Sign in",
        "dashboard.title": "Task Management Dashboard",
        "dashboard.total_tasks": "Total Tasks",
        "dashboard.completed_tasks": "Completed Tasks",
        "dashboard.employees": "Employees",
        "dashboard.in_progress": "In Progress",
        "dashboard.overdue": "Overdue Tasks",
        "dashboard.urgent": "Urgent Tasks",
        "dashboard.completion_rate": "Completion Rate",
        "dashboard.performance": "Performance Overview",
        "dashboard.recent_tasks": "Recent Tasks",
        "dashboard.no_tasks": "No tasks yet.",
        "dashboard.open": "Open",
        "tasks.title": "Task Title",
        "tasks.description": "Description",
        "tasks.deadline": "Deadline",
        "tasks.priority": "Priority",
        "tasks.status": "Status",
        "tasks.assigned_to": "Assigned To",
        "tasks.assigned_by": "Assigned By",
        "tasks.department": "Department",
        "tasks.created_at": "Created",
        "tasks.days_left": "Days left",
        "tasks.urgent": "Urgent",
        "tasks.normal": "Normal",
        "tasks.pending": "Pending",
        "tasks.in_progress": "In Progress",
        "tasks.completed": "Completed",
        "tasks.declined": "Declined",
        "tasks.approved": "Approved",
        "tasks.add_new": "Add New Task",
        "tasks.note": "Note",
        "tasks.empty": "No tasks match the current filters.",
        "tasks.start": "Start",
        "tasks.complete": "Complete",
        "tasks.decline": "Decline",
        "tasks.approve": "Approve",
        "tasks.add_note": "Add note",
        "tasks.upload_file": "Upload file",
        "employees.name": "Name",
        "employees.department": "Department",
        "employees.email": "Email",
        "employees.phone": "Phone",
        "employees.job_title": "Job Title",
        "employees.add_new": "Add New Employee",
        "employees.tasks": "Tasks",
        "employees.completed": "Completed",
        "employees.empty": "No employees match the current filters.",
        "departments.manage": "Manage Departments",
        "departments.new": "New department name",
        "departments.add": "Add department",
        "departments.empty": "No departments yet.",
        "files.name": "File",
        "files.size": "Size",
        "files.type": "Type",
        "files.uploaded_by": "Uploaded By",
        "files.uploaded_at": "Uploaded",
        "files.task": "Task",
        "files.upload": "Upload File",
        "files.choose": "Choose a file",
        "files.empty": "No files match the current filters.",
        "files.pdf": "PDF",
        "files.image": "Image",
        "files.document": "Document",
        "files.spreadsheet": "Spreadsheet",
        "files.file": "Other",
        "auth.sign_in": "Sign in",
        "auth.sign_up": "Create account",
        "auth.sign_out": "Sign out",
        "auth.confirm_sign_out": "Sign out of Taskboard?",
        "auth.email": "Email",
        "auth.password": "Password",
        "auth.name": "Full name",
        "auth.check_email": "Account created. Check your e-mail to confirm it, then sign in.",
        "auth.loading": "Loading your account...",
        "notice.created": "Saved.",
        "notice.updated": "Changes saved.",
        "notice.deleted": "Deleted.",
        "notice.status_changed": "Task status updated.",
        "notice.validation": "Please fill in the required fields.",
        "notice.upstream": "The server could not complete the request. Please try again.",
        "notice.transition": "That action is not available for this task.",
        "notice.not_found": "This record no longer exists.",
        "notice.busy": "Another change is still being saved. Please wait.",
        "notice.permission": "You do not have permission to do that.",
        "notice.session_expired": "Your session has expired. Please sign in again.",
        "common.save": "Save",
        "common.cancel": "Cancel",
        "common.edit": "Edit",
        "common.delete": "Delete",
        "common.view": "View",
        "common.close": "Close",
        "common.search": "Search...",
        "common.filter": "Filter",
        "common.all": "All",
        "common.language": "Language",
        "role.manager": "Manager",
        "role.employee": "Employee",
        "role.viewer": "Viewer",
    },
    "ar": {
        "app.title": "لوحة المهام",
        "nav.dashboard": "لوحة التحكم",
        "nav.employees": "الموظفين",
        "nav.tasks": "المهام",
        "nav.files": "الملفات",
        "nav.sign_in": "تسجيل الدخول",
        "dashboard.title": "لوحة تحكم إدارة المهام",
        "dashboard.total_tasks": "إجمالي المهام",
        "dashboard.completed_tasks": "المهام المكتملة",
        "dashboard.employees": "الموظفين",
        "dashboard.in_progress": "قيد التنفيذ",
        "dashboard.overdue": "المهام المتأخرة",
        "dashboard.urgent": "المهام العاجلة",
        "dashboard.completion_rate": "نسبة الإنجاز",
        "dashboard.performance": "نظرة عامة على الأداء",
        "dashboard.recent_tasks": "أحدث المهام",
        "dashboard.no_tasks": "لا توجد مهام بعد.",
        "dashboard.open": "مفتوحة",
        "tasks.title": "عنوان المهمة",
        "tasks.description": "الوصف",
        "tasks.deadline": "الموعد النهائي",
        "tasks.priority": "الأولوية",
        "tasks.status": "الحالة",
        "tasks.assigned_to": "مُكلف إلى",
        "tasks.assigned_by": "مُكلف من",
        "tasks.department": "القسم",
        "tasks.created_at": "تاريخ الإنشاء",
        "tasks.days_left": "الأيام المتبقية",
        "tasks.urgent": "عاجل",
        "tasks.normal": "عادي",
        "tasks.pending": "في الانتظار",
        "tasks.in_progress": "قيد التنفيذ",
        "tasks.completed": "مكتمل",
        "tasks.declined": "مرفوض",
        "tasks.approved": "معتمد",
        "tasks.add_new": "إضافة مهمة جديدة",
        "tasks.note": "ملاحظة",
        "tasks.empty": "لا توجد مهام مطابقة للتصفية الحالية.",
        "tasks.start": "بدء",
        "tasks.complete": "إنهاء",
        "tasks.decline": "رفض",
        "tasks.approve": "اعتماد",
        "tasks.add_note": "إضافة ملاحظة",
        "tasks.upload_file": "رفع ملف",
        "employees.name": "الاسم",
        "employees.department": "القسم",
        "employees.email": "البريد الإلكتروني",
        "employees.phone": "الهاتف",
        "employees.job_title": "المسمى الوظيفي",
        "employees.add_new": "إضافة موظف جديد",
        "employees.tasks": "المهام",
        "employees.completed": "المكتملة",
        "employees.empty": "لا يوجد موظفون مطابقون للتصفية الحالية.",
        "departments.manage": "إدارة الأقسام",
        "departments.new": "اسم القسم الجديد",
        "departments.add": "إضافة قسم",
        "departments.empty": "لا توجد أقسام بعد.",
        "files.name": "الملف",
        "files.size": "الحجم",
        "files.type": "النوع",
        "files.uploaded_by": "رفع بواسطة",
        "files.uploaded_at": "تاريخ الرفع",
        "files.task": "المهمة",
        "files.upload": "رفع ملف",
        "files.choose": "اختر ملفاً",
        "files.empty": "لا توجد ملفات مطابقة للتصفية الحالية.",
        "files.pdf": "PDF",
        "files.image": "صورة",
        "files.document": "مستند",
        "files.spreadsheet": "جدول بيانات",
        "files.file": "أخرى",
        "auth.sign_in": "تسجيل الدخول",
        "auth.sign_up": "إنشاء حساب",
        "auth.sign_out": "تسجيل الخروج",
        "auth.confirm_sign_out": "هل تريد تسجيل الخروج؟",
        "auth.email": "البريد الإلكتروني",
        "auth.password": "كلمة المرور",
        "auth.name": "الاسم الكامل",
        "auth.check_email": "تم إنشاء الحساب. تحقق من بريدك الإلكتروني لتأكيده ثم سجّل الدخول.",
        "auth.loading": "جارٍ تحميل حسابك...",
        "notice.created": "تم الحفظ.",
        "notice.updated": "تم حفظ التغييرات.",
        "notice.deleted": "تم الحذف.",
        "notice.status_changed": "تم تحديث حالة المهمة.",
        "notice.validation": "يرجى تعبئة الحقول المطلوبة.",
        "notice.upstream": "تعذر على الخادم إتمام الطلب. حاول مرة أخرى.",
        "notice.transition": "هذا الإجراء غير متاح لهذه المهمة.",
        "notice.not_found": "هذا السجل لم يعد موجوداً.",
        "notice.busy": "لا يزال هناك تغيير قيد الحفظ. يرجى الانتظار.",
        "notice.permission": "ليس لديك صلاحية للقيام بذلك.",
        "notice.session_expired": "انتهت صلاحية الجلسة. يرجى تسجيل الدخول مجدداً.",
        "common.save": "حفظ",
        "common.cancel": "إلغاء",
        "common.edit": "تعديل",
        "common.delete": "حذف",
        "common.view": "عرض",
        "common.close": "إغلاق",
        "common.search": "بحث...",
        "common.filter": "تصفية",
        "common.all": "الكل",
        "common.language": "اللغة",
        "role.manager": "مدير",
        "role.employee": "موظف",
        "role.viewer": "مراقب",
    },
}

# Status / urgency / action value -> translation key.
STATUS_KEYS = {
    "pending": "tasks.pending",
    "progress": "tasks.in_progress",
    "completed": "tasks.completed",
    "declined": "tasks.declined",
    "approved": "tasks.approved",
    "urgent": "tasks.urgent",
    "normal": "tasks.normal",
}


class Localizer:
    def __init__(self, locale: str = "en") -> None:
        self._locale = "en"
        self.set_locale(locale)

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def direction(self) -> str:
        return "rtl" if self._locale in RTL_LOCALES else "ltr"

    @property
    def is_rtl(self) -> bool:
        return self.direction == "rtl"

    def set_locale(self, locale: str) -> None:
        locale = (locale or "").strip().lower()
        if locale not in SUPPORTED_LOCALES:
            logger.warning("Unsupported locale %r, keeping %s", locale, self._locale)
            return
        self._locale = locale

    def t(self, key: str) -> str:
        """Translated string for ``key``; the key itself when it has no entry."""
        return TRANSLATIONS[self._locale].get(key, key)

    def status(self, value: str) -> str:
        value = getattr(value, "value", value)
        return self.t(STATUS_KEYS.get(str(value), str(value)))
