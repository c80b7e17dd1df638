from pathlib import Path

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict


class TextStyle(BaseModel):
    font_path: Path
    font_size: int
    line_height: int
    width: int = 950
    vertical_padding: int = 50
    wrap_ratio: float = 0.9
    fill: tuple[int, int, int, int] = (255, 255, 255, 255)


class LayoutSettings(BaseModel):
    canvas_width: int = 1080
    canvas_height: int = 1920
    watermark_scale: float = 0.7
    watermark_bottom_offset: int = 300
    translation_block_padding: int = 100
    translation_margin: int = 50
    arabic_gap: int = 24


class EncodeSettings(BaseModel):
    video_codec: str = "libx264"
    audio_codec: str = "aac"
    pixel_format: str = "yuv420p"
    threads: int = 5
    video_bitrate: str = "2.5M"
    preset: str = "medium"
    crf: int = 23
    maxrate: str = "3M"
    bufsize: str = "6M"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="REELS_", env_nested_delimiter="__", extra="ignore")

    debug: bool = False
    data_dir: Path = Path("data")
    tmp_dir: Path = Path("data/tmp")
    outputs_dir: Path = Path("data/outputs")
    static_dir: Path = Path("static")
    watermark_path: Path = Path("static/images/quran-watermark.png")
    vignette_path: Path = Path("static/bg-vid-gradient.png")

    audio_base_url: str = "https://verses.quran.com/"
    background_url_prefix: str = "https://cdn.pixabay.com/"
    fetch_workers: int = 4
    fetch_timeout_seconds: float = 60.0

    retain_working_directory: bool = False
    presign_expiry_seconds: int = 7200

    r2_account_id: str = ""
    r2_access_key_id: str = ""
    r2_secret_access_key: str = ""
    r2_bucket_name: str = ""

    arabic_text: TextStyle = TextStyle(
        font_path=Path("static/fonts/UthmanicHafs1Ver13.otf"),
        font_size=65,
        line_height=100,
    )
    translation_text: TextStyle = TextStyle(
        font_path=Path("static/fonts/ClashDisplay-Regular.otf"),
        font_size=32,
        line_height=45,
    )
    layout: LayoutSettings = LayoutSettings()
    encode: EncodeSettings = EncodeSettings()


settings = Settings()
