"""Business logic services"""

from portal.app.services.api_service import RecruitmentAPIService
from portal.app.services.wizard_service import ApplicationWizard
from portal.app.services.pipeline_service import CandidateReview, HiringPipeline
from portal.app.services.search_service import CandidateFilter, facet_options
from portal.app.services.validation import validate_step, validate_all

__all__ = [
    'RecruitmentAPIService',
    'ApplicationWizard',
    'CandidateReview',
    'HiringPipeline',
    'CandidateFilter',
    'facet_options',
    'validate_step',
    'validate_all',
]
