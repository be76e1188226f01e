from typing import Annotated

from fastapi import Depends, Request

from src.services.cards.ingestion import CardIngestionService
from src.services.images.assembler import CollectionImageAssembler


def get_ingestion_service(request: Request) -> CardIngestionService:
    return request.app.state.ingestion_service


def get_image_assembler(request: Request) -> CollectionImageAssembler:
    return request.app.state.image_assembler


IngestionServiceDep = Annotated[CardIngestionService, Depends(get_ingestion_service)]
ImageAssemblerDep = Annotated[CollectionImageAssembler, Depends(get_image_assembler)]
