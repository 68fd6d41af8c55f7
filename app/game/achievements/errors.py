class AchievementError(Exception):
    pass


class UnknownAchievementError(AchievementError):
    pass


class AchievementEventPayloadError(AchievementError):
    pass
