from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional


class AccountAttributes(BaseModel):
    country: Optional[str] = Field(None, min_length=2, max_length=2, description="ISO 3166-1 country code")
    base_currency: Optional[str] = Field(None, min_length=3, max_length=3, description="ISO 4217 currency code")
    bank_id: Optional[str] = Field(None, max_length=11, description="Local country bank identifier")
    bank_id_code: Optional[str] = Field(None, description="Identifies the type of bank ID being used")
    bic: Optional[str] = Field(None, description="SWIFT BIC in 8 or 11 character format")
    account_number: Optional[str] = Field(None, description="Account number, generated when omitted")
    iban: Optional[str] = Field(None, description="IBAN of the account, generated when omitted")
    name: List[str] = Field(default_factory=list, description="Name of the account holder, up to four lines")
    alternative_names: Optional[List[str]] = Field(None, description="Alternative primary account names")
    account_classification: Optional[str] = Field(None, description="Personal or Business")
    joint_account: Optional[bool] = Field(None, description="Whether the account is held jointly")
    account_matching_opt_out: Optional[bool] = Field(None, description="Opt out of account matching")
    secondary_identification: Optional[str] = Field(None, description="Secondary identification, e.g. a building society roll number")
    switched: Optional[bool] = Field(None, description="Whether the account has been switched away")
    status: Optional[str] = Field(None, description="Status of the account, pending or confirmed")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if len(v) > 4:
            raise ValueError('Account holder name has at most four lines')
        return v

    @field_validator('account_classification')
    @classmethod
    def validate_account_classification(cls, v):
        if v is not None and v not in ('Personal', 'Business'):
            raise ValueError('Account classification must be Personal or Business')
        return v

    model_config = ConfigDict(extra='allow')


class AccountData(BaseModel):
    id: str = Field(description="Account unique identifier")
    organisation_id: str = Field(description="Owning organisation identifier")
    type: str = Field("accounts", description="Resource type")
    version: Optional[int] = Field(None, ge=0, description="Resource version, used for optimistic locking")
    attributes: Optional[AccountAttributes] = None

    model_config = ConfigDict(extra='allow')


class Account(BaseModel):
    data: AccountData

    model_config = ConfigDict(extra='allow')
