from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "vision-metadata-skill"
    log_level: str = "INFO"

    # Vision collaborator
    vision_provider: str = "mock"  # "mock" | "google"
    vision_features: List[str] = [
        "LANDMARK_DETECTION",
        "LOGO_DETECTION",
        "LABEL_DETECTION",
        "TEXT_DETECTION",
        "DOCUMENT_TEXT_DETECTION",
        "IMAGE_PROPERTIES",
    ]

    # Document source / metadata store collaborators
    document_source: str = "memory"  # "memory" | "local"
    document_root: str = "./documents"
    metadata_store: str = "memory"
    metadata_scope: str = "global"

    # What gets written per file
    output_mode: str = "structured"  # "structured" | "flat" | "both"
    flat_template_key: str = "imageContent"
    flat_field_key: str = "keywords"

    # Whose identity reads the file: the uploader ("user") or the tenant ("enterprise")
    actor_mode: str = "user"
    enterprise_id: Optional[str] = None


settings = Settings()
