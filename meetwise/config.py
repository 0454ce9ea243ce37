from pydantic_settings import BaseSettings

from meetwise.domain.schemas.scheduling import ScoringWeights


class Settings(BaseSettings):
    ENV: str = "development"
    DATABASE_URL: str = "sqlite:///./meetwise.db"
    GOOGLE_CALENDAR_ID: str = "primary"
    GOOGLE_TOKEN_PATH: str = "./token.json"
    GOOGLE_CREDENTIALS_PATH: str = "./credentials.json"
    TIMEZONE: str = "UTC"

    AVAILABILITY_TIMEOUT_S: float = 10.0
    AVAILABILITY_STEP_MINUTES: int = 15
    LOCAL_ATTENDEES: list[str] = ["me"]

    SCORE_BASE: float = 30.0
    SCORE_AVAILABILITY_WEIGHT: float = 40.0
    SCORE_TIME_OF_DAY_WEIGHT: float = 20.0
    SCORE_DAY_OF_WEEK_WEIGHT: float = 10.0
    SCORE_FAR_FUTURE_PENALTY: float = 2.0
    SCORE_SHORT_NOTICE_PENALTY: float = 5.0
    SCORE_AVAILABILITY_MEAN_WEIGHT: float = 0.7
    SCORE_AVAILABILITY_BREADTH_WEIGHT: float = 0.3
    SCORE_CONFLICT_PENALTY: float = 1.0

    def scoring_weights(self) -> ScoringWeights:
        return ScoringWeights(
            base=self.SCORE_BASE,
            availability=self.SCORE_AVAILABILITY_WEIGHT,
            time_of_day=self.SCORE_TIME_OF_DAY_WEIGHT,
            day_of_week=self.SCORE_DAY_OF_WEEK_WEIGHT,
            far_future_penalty=self.SCORE_FAR_FUTURE_PENALTY,
            short_notice_penalty=self.SCORE_SHORT_NOTICE_PENALTY,
            availability_mean=self.SCORE_AVAILABILITY_MEAN_WEIGHT,
            availability_breadth=self.SCORE_AVAILABILITY_BREADTH_WEIGHT,
            conflict_penalty=self.SCORE_CONFLICT_PENALTY,
        )


settings = Settings()
