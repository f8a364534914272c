"""Built-in catalogue of hospital departments administrators can enable."""

# (key, title, icon, category)
HOSPITAL_DEPARTMENTS = [
    ("reception", "Reception", "👋", "Administration"),
    ("registration", "Registration", "📋", "Administration"),
    ("billing", "Billing", "💰", "Administration"),
    ("insurance", "Insurance Desk", "📄", "Administration"),
    ("medical_records", "Medical Records", "🗂️", "Administration"),
    ("emergency", "Emergency Room", "🚨", "Emergency"),
    ("trauma", "Trauma Center", "🏥", "Emergency"),
    ("icu", "Intensive Care Unit", "💓", "Emergency"),
    ("nicu", "Neonatal ICU", "👶", "Emergency"),
    ("ambulance", "Ambulance Services", "🚑", "Emergency"),
    ("triage", "Triage", "🔍", "General"),
    ("general_medicine", "General Medicine", "👨‍⚕️", "General"),
    ("outpatient", "Outpatient Clinic", "🏃", "General"),
    ("inpatient", "Inpatient Ward", "🛏️", "General"),
    ("pediatrics", "Pediatrics", "🧒", "General"),
    ("cardiology", "Cardiology", "❤️", "Specialized"),
    ("neurology", "Neurology", "🧠", "Specialized"),
    ("orthopedics", "Orthopedics", "🦴", "Specialized"),
    ("dermatology", "Dermatology", "🧴", "Specialized"),
    ("ophthalmology", "Ophthalmology", "👁️", "Specialized"),
    ("ent", "ENT", "👂", "Specialized"),
    ("dental", "Dental", "🦷", "Specialized"),
    ("psychiatry", "Psychiatry", "🧪", "Specialized"),
    ("oncology", "Oncology", "⚕️", "Specialized"),
    ("laboratory", "Laboratory", "🧪", "Diagnostics"),
    ("radiology", "Radiology", "📸", "Diagnostics"),
    ("mri", "MRI", "🔬", "Diagnostics"),
    ("ct_scan", "CT Scan", "📽️", "Diagnostics"),
    ("ultrasound", "Ultrasound", "🎥", "Diagnostics"),
    ("blood_bank", "Blood Bank", "🩸", "Diagnostics"),
    ("surgery", "Surgery", "🔪", "Surgery"),
    ("operation_theater", "Operation Theater", "⚔️", "Surgery"),
    ("post_op", "Post-Operation", "🛏️", "Surgery"),
    ("anesthesiology", "Anesthesiology", "💉", "Surgery"),
    ("pharmacy", "Pharmacy", "💊", "Support"),
    ("physiotherapy", "Physiotherapy", "🤸", "Support"),
    ("nutrition", "Nutrition", "🥗", "Support"),
    ("social_services", "Social Services", "🤝", "Support"),
    ("counseling", "Counseling", "💭", "Support"),
    ("cashier", "Cashier", "💵", "Payment"),
    ("discharge", "Discharge", "🚪", "Payment"),
]

BY_KEY = {key: (title, icon, category) for key, title, icon, category in HOSPITAL_DEPARTMENTS}
BY_TITLE = {title: (key, icon, category) for key, title, icon, category in HOSPITAL_DEPARTMENTS}


def lookup(key_or_title: str):
    """Return ``(title, icon, category)`` for a catalogue key or title, else None."""
    if key_or_title in BY_KEY:
        return BY_KEY[key_or_title]
    if key_or_title in BY_TITLE:
        _, icon, category = BY_TITLE[key_or_title]
        return key_or_title, icon, category
    return None


def as_dicts():
    return [
        {'id': key, 'title': title, 'icon': icon, 'category': category}
        for key, title, icon, category in HOSPITAL_DEPARTMENTS
    ]
