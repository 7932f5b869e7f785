"""Declarative per-source field maps.

Each canonical field maps to an ordered list of candidate raw paths. A path is
a dotted string for nested objects or a callable for derived values. The first
candidate yielding a non-empty value wins. Adding a source is a new entry here.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from ..models.opportunity import SourceId

Candidate = Union[str, Callable[[Dict[str, Any]], Any]]


@dataclass(frozen=True)
class SourceMapping:
    fields: Dict[str, List[Candidate]]
    link_template: Optional[str] = None
    link_id_paths: List[Candidate] = field(default_factory=list)
    defaults: Dict[str, Any] = field(default_factory=dict)


def _nih_total_cost(raw: Dict[str, Any]) -> Optional[float]:
    """Sum of agency_ic_fundings[].total_cost, None when no funding rows."""
    fundings = raw.get("agency_ic_fundings")
    if not isinstance(fundings, list) or not fundings:
        return None
    total = 0.0
    seen = False
    for funding in fundings:
        if not isinstance(funding, dict):
            continue
        cost = funding.get("total_cost")
        if isinstance(cost, (int, float)) and not isinstance(cost, bool):
            total += cost
            seen = True
    return total if seen else None


def _fema_project_id(raw: Dict[str, Any]) -> Optional[str]:
    disaster = raw.get("disasterNumber")
    project = raw.get("projectNumber") or raw.get("pwNumber")
    if disaster in (None, "") or project in (None, ""):
        return None
    return f"{disaster}-{project}"


_REPORTER_FIELDS: Dict[str, List[Candidate]] = {
    "id": ["appl_id", "ApplId", "id"],
    "title": ["project_title", "title"],
    "agency": ["agency_ic_admin.name", "agency_ic_admin.abbreviation", "adminAgency", "agency"],
    "description": ["abstract_text", "abstract", "phr_text"],
    "posted": ["project_start_date", "startDate"],
    "deadline": ["project_end_date", "endDate"],
    "category": ["activity_code", "funding_mechanism", "activityCode"],
    "eligibility": [],
    "link": [],
}


SOURCE_MAPPINGS: Dict[SourceId, SourceMapping] = {
    SourceId.GRANTS_GOV: SourceMapping(
        fields={
            "id": ["id", "opportunityId", "oppNum", "number"],
            "title": ["title", "opportunityTitle"],
            "agency": ["agencyName", "agency", "agencyCode"],
            "description": ["synopsis.synopsisDesc", "synopsis", "description"],
            "amount": ["awardCeiling", "awardFloor", "estimatedFunding"],
            "posted": ["openDate", "postDate", "postedDate"],
            "deadline": ["closeDate", "deadline"],
            "eligibility": ["applicantEligibility", "eligibilities", "applicantTypes", "additionalInfoOnEligibility"],
            "category": ["fundingCategory", "categoryOfFundingActivity", "category"],
            "link": ["link"],
        },
        link_template="https://www.grants.gov/search-results-detail/{id}",
        link_id_paths=["id", "opportunityId", "oppNum", "number"],
    ),
    SourceId.SAM_GOV: SourceMapping(
        fields={
            "id": ["noticeId"],
            "title": ["title"],
            "agency": ["fullParentPathName", "department.name", "department", "departmentName", "organizationName"],
            "description": ["description.body", "description"],
            "amount": ["award.amount", "award"],
            "posted": ["postedDate"],
            "deadline": ["responseDeadLine"],
            "eligibility": ["typeOfSetAsideDescription", "setAsideDescription"],
            "category": ["type.value", "type", "baseType"],
            "link": ["uiLink"],
        },
        link_template="https://sam.gov/opp/{id}/view",
        link_id_paths=["noticeId"],
    ),
    SourceId.NIH: SourceMapping(
        fields={
            **_REPORTER_FIELDS,
            "amount": [_nih_total_cost, "award_amount", "awardAmount"],
        },
        link_template="https://reporter.nih.gov/project-details/{id}",
        link_id_paths=["appl_id", "ApplId", "id"],
    ),
    SourceId.FEDERAL_REPORTER: SourceMapping(
        fields={
            **_REPORTER_FIELDS,
            "amount": ["award_amount", "totalCost", _nih_total_cost],
        },
        link_template="https://reporter.nih.gov/project-details/{id}",
        link_id_paths=["appl_id", "ApplId", "id"],
    ),
    SourceId.NSF: SourceMapping(
        fields={
            "id": ["id"],
            "title": ["title"],
            "agency": ["agency", "awardAgencyCode"],
            "description": ["abstractText", "abstract"],
            "amount": ["estimatedTotalAmt", "fundsObligatedAmt", "estimatedAmount", "obligatedAmount"],
            "posted": ["date", "startDate"],
            "deadline": ["expDate"],
            "eligibility": [],
            "category": ["primaryProgram", "fundProgramName"],
            "link": [],
        },
        link_template="https://www.nsf.gov/awardsearch/showAward?AWD_ID={id}",
        link_id_paths=["id"],
    ),
    SourceId.USASPENDING: SourceMapping(
        fields={
            "id": ["generated_internal_id", "Award ID", "id", "awardId"],
            "title": ["Description", "description", "title"],
            "agency": ["Awarding Agency", "awarding_agency", "Awarding Sub Agency"],
            "description": ["Description", "description"],
            "amount": ["Award Amount", "award_amount", "amount"],
            "posted": ["Start Date", "start_date"],
            "deadline": ["End Date", "end_date"],
            "eligibility": ["Recipient Name"],
            "category": ["Award Type", "award_type"],
            "link": [],
        },
        link_template="https://www.usaspending.gov/award/{id}",
        link_id_paths=["generated_internal_id"],
    ),
    SourceId.FEMA: SourceMapping(
        fields={
            "id": ["id", _fema_project_id],
            "title": ["projectTitle", "declarationTitle", "title"],
            "agency": [],
            "description": ["projectDescription", "damageCategoryDescrip", "description"],
            "amount": ["federalShareObligated", "totalObligated", "projectAmount"],
            "posted": ["obligatedDate", "declarationDate"],
            "deadline": [],
            "eligibility": ["applicantName", "stateAbbreviation"],
            "category": ["incidentType", "damageCategory"],
            "link": [],
        },
        defaults={"agency": "FEMA"},
        link_template="https://www.fema.gov/disaster/{id}",
        link_id_paths=["disasterNumber"],
    ),
    SourceId.PROPUBLICA: SourceMapping(
        fields={
            "id": ["ein", "strein"],
            "title": ["name", "sub_name"],
            "agency": ["name"],
            "description": ["sub_name", "city"],
            "amount": ["income_amount", "revenue_amount", "totalRevenue"],
            "posted": ["ruling_date", "updated"],
            "deadline": [],
            "eligibility": ["state"],
            "category": ["ntee_code", "nteeCode"],
            "link": [],
        },
        link_template="https://projects.propublica.org/nonprofits/organizations/{id}",
        link_id_paths=["ein", "strein"],
    ),
    SourceId.REGULATIONS: SourceMapping(
        fields={
            "id": ["id", "attributes.documentId", "documentId"],
            "title": ["attributes.title", "title"],
            "agency": ["attributes.agencyId", "agencyId"],
            "description": ["attributes.summary", "summary", "attributes.highlightedContent"],
            "amount": [],
            "posted": ["attributes.postedDate", "postedDate"],
            "deadline": ["attributes.commentEndDate", "commentEndDate"],
            "eligibility": [],
            "category": ["attributes.documentType", "documentType"],
            "link": [],
        },
        link_template="https://www.regulations.gov/document/{id}",
        link_id_paths=["id", "attributes.documentId", "documentId"],
    ),
    SourceId.CALIFORNIA: SourceMapping(
        fields={
            "id": ["_id", "opportunity_id", "PortalID"],
            "title": ["title", "opportunity_title", "Title"],
            "agency": ["grantmaker_name", "AgencyDept"],
            "description": ["description", "Description", "Purpose"],
            "amount": ["expected_award_ceiling", "estimated_available_funds", "EstAvailFunds"],
            "posted": ["open_date", "application_open_date", "OpenDate"],
            "deadline": ["close_date", "application_deadline", "ApplicationDeadline"],
            "eligibility": ["applicant_type", "eligible_applicants", "ApplicantType"],
            "category": ["category", "Categories"],
            "link": ["application_url", "opportunity_url", "GrantURL"],
        },
        link_template="https://www.grants.ca.gov/grants/{id}/",
        link_id_paths=["_id", "opportunity_id", "PortalID"],
    ),
}


def get_mapping(source: SourceId) -> SourceMapping:
    return SOURCE_MAPPINGS[SourceId(source)]
