from pydantic import BaseModel, ConfigDict, Field


class AddressRange(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cidr: str = Field(alias="ip_prefix")
    region: str
    service: str
    network_border_group: str | None = None

    def to_dict(self) -> dict:
        return {"ip_prefix": self.cidr, "region": self.region, "service": self.service}


class _IPv6Range(BaseModel):
    ipv6_prefix: str
    region: str
    service: str
    network_border_group: str | None = None


class AddressRangeSet(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    create_date: str = Field(alias="createDate")
    sync_token: str = Field(alias="syncToken")
    prefixes: tuple[AddressRange, ...] = ()
    ipv6_prefixes: tuple[_IPv6Range, ...] = ()

    @property
    def ranges(self) -> tuple[AddressRange, ...]:
        """IPv4 ranges in document order, followed by the IPv6 ranges."""
        v6 = tuple(
            AddressRange(
                cidr=p.ipv6_prefix,
                region=p.region,
                service=p.service,
                network_border_group=p.network_border_group,
            )
            for p in self.ipv6_prefixes
        )
        return self.prefixes + v6

    @classmethod
    def from_bytes(cls, data: bytes) -> "AddressRangeSet":
        return cls.model_validate_json(data)
