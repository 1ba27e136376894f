from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
import structlog
from database import get_db, Category, Expense, User
from schemas import (
    CalendarMonth,
    CategoryCreate,
    CategoryResponse,
    ChartData,
    ExpenseIn,
    ExpenseResponse,
    JoinedExpense,
    SuggestionField,
)
from analytics import (
    chart_data,
    default_chart_range,
    filter_suggestions,
    join_expenses,
    month_view,
)
from auth import get_current_user
from datetime import date
from typing import Optional

logger = structlog.get_logger(__name__)

router = APIRouter()


def _user_categories(db: Session, user: User):
    return (
        db.query(Category)
        .filter(Category.user_id == user.id)
        .order_by(Category.created_at)
        .all()
    )


def _user_expenses(db: Session, user: User, on_date: Optional[date] = None):
    query = db.query(Expense).filter(Expense.user_id == user.id)
    if on_date:
        query = query.filter(Expense.date == on_date)
    return query.order_by(Expense.date.desc(), Expense.created_at.desc()).all()


def _joined_expenses(db: Session, user: User, on_date: Optional[date] = None):
    return join_expenses(_user_expenses(db, user, on_date), _user_categories(db, user))


def _get_owned_expense(db: Session, user: User, expense_id: str) -> Expense:
    expense = (
        db.query(Expense)
        .filter(Expense.id == expense_id, Expense.user_id == user.id)
        .first()
    )
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense


def _check_category(db: Session, user: User, category_id: Optional[str]):
    if category_id is None:
        return
    owned = (
        db.query(Category)
        .filter(Category.id == category_id, Category.user_id == user.id)
        .first()
    )
    if not owned:
        raise HTTPException(status_code=400, detail="Unknown category")


# categories
@router.get("/categories", response_model=list[CategoryResponse])
def get_categories(
    db: Session = Depends(get_db), current_user: User = Depends(get_current_user)
):
    return _user_categories(db, current_user)


@router.post(
    "/categories",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    category: CategoryCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    name = category.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Category name cannot be empty")

    db_category = Category(name=name, color=category.color, user_id=current_user.id)
    db.add(db_category)
    db.commit()
    db.refresh(db_category)

    logger.info("category_created", user_id=current_user.id, category_id=db_category.id)
    return db_category


@router.delete("/categories/{category_id}")
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    category = (
        db.query(Category)
        .filter(Category.id == category_id, Category.user_id == current_user.id)
        .first()
    )
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")

    # expenses keep existing without a category
    db.query(Expense).filter(
        Expense.category_id == category_id, Expense.user_id == current_user.id
    ).update({Expense.category_id: None}, synchronize_session=False)
    db.delete(category)
    db.commit()

    logger.info("category_deleted", user_id=current_user.id, category_id=category_id)
    return {"message": "Category deleted successfully"}


# expenses
@router.get("/expenses", response_model=list[JoinedExpense])
def get_expenses(
    on_date: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _joined_expenses(db, current_user, on_date)


@router.get("/expenses/suggestions", response_model=list[str])
def get_suggestions(
    field: SuggestionField,
    q: str = "",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    column = getattr(Expense, field)
    rows = (
        db.query(column)
        .filter(Expense.user_id == current_user.id, column.isnot(None))
        .distinct()
        .all()
    )
    return filter_suggestions((row[0] for row in rows), q)


@router.get("/expenses/{expense_id}", response_model=ExpenseResponse)
def get_expense(
    expense_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return _get_owned_expense(db, current_user, expense_id)


@router.post(
    "/expenses",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_expense(
    expense: ExpenseIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if expense.category_id is None:
        raise HTTPException(
            status_code=400, detail="Date, category and amount are required"
        )
    _check_category(db, current_user, expense.category_id)

    db_expense = Expense(**expense.model_dump(), user_id=current_user.id)
    db.add(db_expense)
    db.commit()
    db.refresh(db_expense)

    logger.info(
        "expense_created",
        user_id=current_user.id,
        expense_id=db_expense.id,
        amount=db_expense.amount,
    )
    return db_expense


@router.put("/expenses/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: str,
    expense: ExpenseIn,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    db_expense = _get_owned_expense(db, current_user, expense_id)
    _check_category(db, current_user, expense.category_id)

    for field, value in expense.model_dump().items():
        setattr(db_expense, field, value)
    db.commit()
    db.refresh(db_expense)

    logger.info("expense_updated", user_id=current_user.id, expense_id=expense_id)
    return db_expense


@router.delete("/expenses/{expense_id}")
def delete_expense(
    expense_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    expense = _get_owned_expense(db, current_user, expense_id)
    db.delete(expense)
    db.commit()

    logger.info("expense_deleted", user_id=current_user.id, expense_id=expense_id)
    return {"message": "Expense deleted successfully"}


# views over the joined expenses
@router.get("/calendar/{year}/{month}", response_model=CalendarMonth)
def get_calendar_month(
    year: int,
    month: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not 1 <= month <= 12 or not 1900 <= year <= 2999:
        raise HTTPException(status_code=400, detail="Invalid month")
    return month_view(_joined_expenses(db, current_user), year, month)


@router.get("/charts", response_model=ChartData)
def get_charts(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    default_start, default_end = default_chart_range()
    start_date = start_date or default_start
    end_date = end_date or default_end
    if start_date > end_date:
        raise HTTPException(
            status_code=400, detail="start_date must not be after end_date"
        )
    return chart_data(_joined_expenses(db, current_user), start_date, end_date)
