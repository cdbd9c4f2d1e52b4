from debt_manager.services.advisory_service import DebtAdvisor


_advisor: DebtAdvisor | None = None


def get_advisor() -> DebtAdvisor:
    global _advisor
    if _advisor is None:
        _advisor = DebtAdvisor.from_env()
    return _advisor
