"""
Browser URL helpers for the appointment site.
"""

BASE_URL = "https://ais.usvisa-info.com"


class SitePages:
    """URLs for one applicant's schedule"""

    def __init__(self, country_code: str, schedule_id: str, base_url: str = BASE_URL):
        self.base_url = base_url.rstrip("/")
        self.country_code = country_code
        self.schedule_id = schedule_id

    def login(self) -> str:
        return f"{self.base_url}/{self.country_code}/niv/users/sign_in"

    def appointment_days(self, facility_id: int) -> str:
        return (
            f"{self.base_url}/{self.country_code}/niv/schedule/{self.schedule_id}"
            f"/appointment/days/{facility_id}.json?appointments%5Bexpedite%5D=false"
        )
