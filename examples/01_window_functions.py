"""Example: Window functions and CTEs.

Keeps the latest row per customer with ROW_NUMBER inside a CTE, then shows a
running total and a centred moving average.
"""

from sqlalchemy import text

from withover import Window, col, connect
from withover import functions as F

db = connect("sqlite:///:memory:")

with db.connection_manager.connect() as conn:
    conn.execute(
        text("CREATE TABLE orders (id INTEGER PRIMARY KEY, unionid TEXT, amount REAL, created_at TEXT)")
    )
    conn.execute(
        text("INSERT INTO orders VALUES (:id, :unionid, :amount, :created_at)"),
        [
            {"id": 1, "unionid": "u1", "amount": 100.0, "created_at": "2024-01-01"},
            {"id": 2, "unionid": "u1", "amount": 150.0, "created_at": "2024-01-02"},
            {"id": 3, "unionid": "u2", "amount": 200.0, "created_at": "2024-01-03"},
            {"id": 4, "unionid": "u2", "amount": 175.0, "created_at": "2024-01-04"},
            {"id": 5, "unionid": "u3", "amount": 120.0, "created_at": "2024-01-05"},
        ],
    )

# Latest order per customer
rn = F.row_number().over(partition_by="unionid", order_by=col("created_at").desc()).alias("rn")
ranked = db.table("orders").select(col("*"), rn).where(col("unionid").isin(["u1", "u2"]))
latest = db.with_cte("ranked", ranked).select_from_cte("ranked").where(col("rn") == 1)

sql, params = latest.compile()
print(f"SQL: {sql}")
print(f"Params: {params}")
print(f"Latest orders: {latest.collect()}")

# Running total per customer
running = (
    F.sum("amount")
    .over(Window.partition_by("unionid").order_by("created_at").rows_between(None, 0))
    .alias("running_total")
)
print(f"Running totals: {db.table('orders').select('id', 'unionid', running).collect()}")

# Centred moving average: ROWS BETWEEN 1 PRECEDING AND 1 FOLLOWING
moving = F.avg("amount").over(Window.order_by("created_at").rows_between(-1, 1)).alias("moving_avg")
print(f"Moving average: {db.table('orders').select('id', moving).collect()}")

db.close()
