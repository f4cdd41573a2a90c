# controller/meta_controller.py
from fastapi import APIRouter
from config.settings import settings
from model.api import FeatureLimits, FeaturesResponse, TypeResponse
from util.constants import API_TYPE, FEATURE_OPTIONS, FEATURE_PRESETS, InternalURIs

meta_router = APIRouter()


@meta_router.get(InternalURIs.TYPE, response_model=TypeResponse)
async def api_type() -> TypeResponse:
    return TypeResponse(type=API_TYPE, engine=settings.ENGINE_LABEL)


@meta_router.get(InternalURIs.FEATURES, response_model=FeaturesResponse)
async def features() -> FeaturesResponse:
    return FeaturesResponse(
        presets=list(FEATURE_PRESETS),
        options=list(FEATURE_OPTIONS),
        limits=FeatureLimits(max_size_mb=settings.MAX_PAYLOAD_MB),
    )
