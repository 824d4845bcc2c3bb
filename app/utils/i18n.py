# English / Arabic labels for the admin screens
LOCALES = ("en", "ar")
DEFAULT_LOCALE = "en"

TRANSLATIONS = {
    "en": {
        # Navigation
        "dashboard": "Dashboard",
        "users": "Users",
        "malls": "Malls",
        "shops": "Shops",
        "inquiries": "Inquiries",
        "bookings": "Bookings",
        "payments": "Payments",
        "notifications": "Notifications",
        "reports": "Reports",
        "analytics": "Analytics",
        "settings": "Settings",
        "security": "Security",
        # Screen titles
        "userManagement": "User Management",
        "mallManagement": "Mall Management",
        "shopManagement": "Shop Management",
        "bookingManagement": "Booking Management",
        "paymentManagement": "Payment Management",
        "inquiryManagement": "Inquiry Management",
        "notificationManagement": "Notification Management",
        # Common
        "active": "Active",
        "inactive": "Inactive",
        # Statuses
        "planning": "Planning",
        "under_construction": "Under Construction",
        "completed": "Completed",
        "available": "Available",
        "reserved": "Reserved",
        "sold": "Sold",
        "rented": "Rented",
        "pending": "Pending",
        "confirmed": "Confirmed",
        "cancelled": "Cancelled",
        "partial": "Partial",
        "failed": "Failed",
        "refunded": "Refunded",
        "responded": "Responded",
        "closed": "Closed",
        # Notification types
        "general": "General",
        "inquiry": "Inquiry",
        "booking": "Booking",
        "payment": "Payment",
        "system": "System",
    },
    "ar": {
        "dashboard": "لوحة التحكم",
        "users": "المستخدمين",
        "malls": "المولات",
        "shops": "المحلات",
        "inquiries": "الاستفسارات",
        "bookings": "الحجوزات",
        "payments": "المدفوعات",
        "notifications": "الإشعارات",
        "reports": "التقارير",
        "analytics": "التحليلات",
        "settings": "الإعدادات",
        "security": "الأمان",
        "userManagement": "إدارة المستخدمين",
        "mallManagement": "إدارة المولات",
        "shopManagement": "إدارة المحلات",
        "bookingManagement": "إدارة الحجوزات",
        "paymentManagement": "إدارة المدفوعات",
        "inquiryManagement": "إدارة الاستفسارات",
        "notificationManagement": "إدارة الإشعارات",
        "active": "نشط",
        "inactive": "غير نشط",
        "planning": "تخطيط",
        "under_construction": "تحت الإنشاء",
        "completed": "مكتمل",
        "available": "متاح",
        "reserved": "محجوز",
        "sold": "مباع",
        "rented": "مؤجر",
        "pending": "معلق",
        "confirmed": "مؤكد",
        "cancelled": "ملغي",
        "partial": "جزئي",
        "failed": "فشل",
        "refunded": "مسترد",
        "responded": "تم الرد",
        "closed": "مغلق",
        "general": "عام",
        "inquiry": "استفسار",
        "booking": "حجز",
        "payment": "دفع",
        "system": "نظام",
    },
}


def resolve_locale(value):
    if value in LOCALES:
        return value
    return DEFAULT_LOCALE


def translate(key, locale=DEFAULT_LOCALE):
    """Label for ``key`` in ``locale``, falling back to English then the key."""
    if key is None:
        return None
    table = TRANSLATIONS.get(locale, TRANSLATIONS[DEFAULT_LOCALE])
    if key in table:
        return table[key]
    return TRANSLATIONS[DEFAULT_LOCALE].get(key, key)


def add_labels(rows, fields, locale):
    """Attach ``<field>_label`` entries for status-like fields."""
    locale = resolve_locale(locale)
    for row in rows:
        for field in fields:
            row[f"{field}_label"] = translate(row.get(field), locale)
    return rows
