from sqlalchemy import select

from app.backoffice_nav.db.models import AppSetting


class AppSettingsRepository:
    def __init__(self, db):
        self.db = db

    def get_by_id(self, setting_id: str):
        stmt = select(AppSetting).where(AppSetting.id == setting_id)
        return self.db.execute(stmt).scalars().first()

    def upsert(self, setting_id: str, value: str):
        setting = self.get_by_id(setting_id)
        if setting is None:
            setting = AppSetting(id=setting_id, value=value)
        else:
            setting.value = value
        self.db.add(setting)
        self.db.commit()
        self.db.refresh(setting)
        return setting

    def delete(self, setting_id: str) -> None:
        setting = self.get_by_id(setting_id)
        if setting is None:
            return
        self.db.delete(setting)
        self.db.commit()


class AppSettingsStore:
    """Key-value view over the ``app_settings`` table."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def get(self, key: str) -> str | None:
        with self.session_factory() as db:
            setting = AppSettingsRepository(db).get_by_id(key)
            return setting.value if setting is not None else None

    def set(self, key: str, value: str) -> None:
        with self.session_factory() as db:
            AppSettingsRepository(db).upsert(key, value)

    def delete(self, key: str) -> None:
        with self.session_factory() as db:
            AppSettingsRepository(db).delete(key)
