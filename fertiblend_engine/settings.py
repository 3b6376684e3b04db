from __future__ import annotations

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.models.blend import SolverConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )
    # Auth (single key)
    api_key: Optional[str] = Field(default=None, alias="FERTIBLEND_API_KEY")

    # HTTP
    http_host: str = Field("0.0.0.0", alias="FERTIBLEND_HTTP_HOST")
    http_port: int = Field(8080, alias="FERTIBLEND_HTTP_PORT")

    # Logging
    log_level: str = Field("info", alias="LOG_LEVEL")
    log_format: str = Field("human", alias="LOG_FORMAT")  # json|human
    log_to_file: bool = Field(False, alias="LOG_TO_FILE")
    log_file_path: Optional[str] = Field(None, alias="LOG_FILE_PATH")

    # Solver
    solver_max_iter: int = Field(4000, ge=0, alias="FERTIBLEND_SOLVER_MAX_ITER")
    solver_tol: float = Field(1e-7, gt=0, alias="FERTIBLEND_SOLVER_TOL")
    solver_lambda_mass: float = Field(1.0, ge=0, alias="FERTIBLEND_SOLVER_LAMBDA_MASS")
    solver_lambda_reg: float = Field(1e-6, ge=0, alias="FERTIBLEND_SOLVER_LAMBDA_REG")

    def solver_config(self) -> SolverConfig:
        return SolverConfig(
            max_iter=self.solver_max_iter,
            tol=self.solver_tol,
            lambda_mass=self.solver_lambda_mass,
            lambda_reg=self.solver_lambda_reg,
        )


def get_settings() -> Settings:
    return Settings()
