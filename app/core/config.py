from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
	model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

	# only the bot needs a token; services and tests run without one
	bot_token: str | None = None
	admin_ids: str | None = None

	database_url: str = "sqlite+aiosqlite:///./storefront.db"

	# messaging
	manager_chat_id: int | None = None

	# orders
	order_placement_timeout: float = 10.0

	log_level: str = "INFO"

	@property
	def admin_id_set(self) -> set[int]:
		if not self.admin_ids:
			return set()
		return {int(x.strip()) for x in self.admin_ids.split(",") if x.strip()}


settings = Settings()  # type: ignore[arg-type]
