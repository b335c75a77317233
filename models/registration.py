from pydantic import BaseModel, EmailStr
from typing import Optional


# --------------------------------------------------------------------
# PUBLIC REQUEST BODY: What the registration form sends
# Every registrant starts as an unverified member.
# --------------------------------------------------------------------
class RegistrationRequest(BaseModel):
    name: str
    email: EmailStr
    password: str

    ward_id: Optional[str] = None
    zone_id: Optional[str] = None

    phone: Optional[str] = None
    address: Optional[str] = None
    id_number: Optional[str] = None
    id_type: Optional[str] = None
    dob: Optional[str] = None
    occupation: Optional[str] = None
    qualification: Optional[str] = None
    local_govt: Optional[str] = None
