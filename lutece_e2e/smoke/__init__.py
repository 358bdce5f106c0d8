"""Stand-alone back-office checks (login, navigation, stored session)."""
