from dataclasses import dataclass


@dataclass(frozen=True)
class AccessPolicy:
    """Reserved identifiers and passcodes, compared here and nowhere else."""

    admin_tag_id: str
    new_tag_sentinel: str
    fallback_passcode: str
    admin_marker: str

    @classmethod
    def from_config(cls, config) -> 'AccessPolicy':
        return cls(
            admin_tag_id=config['ADMIN_TAG_ID'],
            new_tag_sentinel=config['NEW_TAG_SENTINEL'],
            fallback_passcode=config['FALLBACK_PASSCODE'],
            admin_marker=config['ADMIN_MARKER'],
        )

    def is_admin_tag(self, tag_id: str) -> bool:
        return bool(self.admin_tag_id) and tag_id == self.admin_tag_id

    def is_new_tag(self, tag_id: str) -> bool:
        return bool(self.new_tag_sentinel) and tag_id == self.new_tag_sentinel

    def is_fallback(self, passphrase: str) -> bool:
        return bool(self.fallback_passcode) and passphrase == self.fallback_passcode

    def fallback_role(self, tag_id: str) -> str:
        return 'admin' if self.admin_marker and self.admin_marker in tag_id else 'user'
