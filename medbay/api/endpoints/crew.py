from fastapi import APIRouter, HTTPException, status
from sqlalchemy import select

from medbay.api.deps import columns_dep, db_dep, ensure_ok, options_dep, user_dep
from medbay.core import models, schemas
from medbay.core.exceptions import RowNotFoundError
from medbay.core.repository import CrewRepository
from medbay.core.security import create_access_token, hash_password, verify_password

router = APIRouter(prefix="/crew", tags=["Crew"])


# Add crew member
@router.post(
    "/signup",
    response_model=schemas.CrewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def sign_up(crew_member: schemas.CrewCreate, db: db_dep):
    repository = CrewRepository(db)

    # Validate whether the email is already taken
    existing = await repository.read_by_filter("email", [crew_member.email], ["id"])
    if existing:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Crew member already exists"
        )

    result = await repository.insert(
        {
            **crew_member.model_dump(exclude={"password"}),
            "password": hash_password(crew_member.password),
        }
    )
    ensure_ok(result, "Failed to sign up")
    return await repository.get(result.id)


@router.post("/login", response_model=schemas.Token)
async def log_in(credentials: schemas.CrewLogin, db: db_dep):
    query = select(models.Crew).where(models.Crew.email == credentials.email)
    result = await db.execute(query)
    crew_member = result.scalars().first()

    if not crew_member:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Crew member does not exist"
        )

    if not verify_password(credentials.password, crew_member.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect password"
        )
    token = create_access_token({"user_id": crew_member.id})
    return {"access_token": token, "token_type": "bearer"}


@router.get("/me", response_model=schemas.CrewResponse)
async def who_am_i(current_user: user_dep):
    return current_user


@router.get("", response_model=schemas.EntityState)
async def list_crew(db: db_dep, options: options_dep, columns: columns_dep):
    return await CrewRepository(db).read_categorized(options, columns)


@router.get("/{crew_id}", response_model=schemas.CrewResponse)
async def get_crew_member(crew_id: int, db: db_dep):
    try:
        return await CrewRepository(db).get(crew_id)
    except RowNotFoundError as error:
        raise HTTPException(status.HTTP_404_NOT_FOUND, error.message)


# Crew members may only edit their own record
@router.patch("/{crew_id}", response_model=schemas.CrewResponse)
async def update_crew_member(
    crew_id: int, changes: schemas.CrewUpdate, db: db_dep, current_user: user_dep
):
    if current_user.id != crew_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only update your own crew record",
        )

    repository = CrewRepository(db)
    result = await repository.update(crew_id, changes.model_dump(exclude_unset=True))
    ensure_ok(result, "Update failed")
    return await repository.get(crew_id)
