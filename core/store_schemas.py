"""Schemas for toolkeeper's own documents: the profile store and profile bundles."""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from utils.constants import BUNDLE_TYPE


class _Open(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class ProfileToolEntrySchema(_Open):
    key: str = Field(min_length=1)
    enabled: bool


class ProfileSchema(_Open):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    tools: List[ProfileToolEntrySchema] = Field(default_factory=list)
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")


class ProfileStoreSchema(_Open):
    version: int
    profiles: List[ProfileSchema] = Field(default_factory=list)
    active_profile_id: Optional[str] = Field(default=None, alias="activeProfileId")


class ExportedToolConfigSchema(_Open):
    kind: Literal["mcp_server", "skill", "command", "hook"]


class ExportedToolSchema(_Open):
    key: str = Field(min_length=1)
    enabled: bool
    type: Literal["skill", "mcp_server", "hook", "command"]
    name: str
    config: ExportedToolConfigSchema


class BundleProfileSchema(_Open):
    name: str = Field(min_length=1)
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")
    exported_at: str = Field(alias="exportedAt")


class ProfileExportBundleSchema(_Open):
    bundle_type: Literal[BUNDLE_TYPE] = Field(alias="bundleType")
    version: int
    agent_id: str = Field(alias="agentId")
    profile: BundleProfileSchema
    tools: List[ExportedToolSchema] = Field(default_factory=list)


STORE_SCHEMAS: Dict[str, Any] = {
    "profile-store": ProfileStoreSchema,
    "profile-bundle": ProfileExportBundleSchema,
}
