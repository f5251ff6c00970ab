metro_cities = [
    "new delhi",
    "delhi",
    "mumbai",
    "navi mumbai",
    "kolkata",
    "chennai",
    "bengaluru",
    "bangalore",
    "hyderabad",
    "pune",
    "ahmedabad",
]

# north east, jammu & kashmir and ladakh
special_zone = [
    "arunachal pradesh",
    "assam",
    "manipur",
    "meghalaya",
    "mizoram",
    "nagaland",
    "sikkim",
    "tripura",
    "jammu and kashmir",
    "jammu & kashmir",
    "ladakh",
]

island_zone = [
    "andaman and nicobar islands",
    "andaman & nicobar islands",
    "lakshadweep",
]
